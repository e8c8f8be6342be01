"""
Test fixtures shared across all tests.

Architecture:
- The app reads its settings at import time, so the test environment
  (SQLite database in a temp dir, secret key, bootstrap token) is set
  here BEFORE anything from app is imported.
- pyproject.toml sets the asyncio fixture and test loop scope to session,
  so every test shares ONE event loop with the session-scoped setup_db.
- The HTTP test client uses the real FastAPI app over ASGITransport.
- The PDF renderer never starts a real browser in tests: FakeEngine
  stands in for Playwright and records what it was asked to do.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

_TEST_DB_DIR = tempfile.mkdtemp(prefix="rsvp-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/test.db"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["ADMIN_BOOTSTRAP_TOKEN"] = "bootstrap-test-token"
os.environ["APP_ENV"] = "test"
os.environ["CHROMIUM_EXECUTABLE_PATH"] = ""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete

from app.config import settings
from app.database import AsyncSessionLocal, Base, engine
from app.main import app
from app.models import RSVP, AdminUser
from app.services.auth import create_session_token, hash_password
from app.services.report_data import GuestRSVP

ADMIN_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture(scope="session")
async def setup_db():
    """Create all tables once before the test session."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def client(setup_db):
    """Async HTTP test client against the real app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# --- Seed data fixtures ---

@pytest_asyncio.fixture
async def admin_user(setup_db):
    """Create an admin with a known password."""
    user = AdminUser(
        email=f"admin_{os.urandom(4).hex()}@example.com",
        password_hash=hash_password(ADMIN_PASSWORD, iterations=1_000),
    )
    async with AsyncSessionLocal() as session:
        session.add(user)
        await session.commit()
        await session.refresh(user)
    return user


@pytest.fixture
def admin_password():
    return ADMIN_PASSWORD


@pytest.fixture
def admin_headers(admin_user):
    """Cookie header carrying a valid admin session."""
    token = create_session_token(admin_user)
    return {"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}


@pytest_asyncio.fixture
async def seeded_rsvps(setup_db):
    """Replace all RSVPs with three known rows.

    created_at is spread out so "newest first" is well defined:
    Carla (newest), Beto, Ana (oldest).
    """
    base = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    rsvps = [
        RSVP(full_name="Ana López", guests_count=2, phone="555-0101",
             notes="Vegetariana", attending=True, created_at=base),
        RSVP(full_name="Beto Ruiz", guests_count=0, phone=None,
             notes=None, attending=False, created_at=base + timedelta(days=1)),
        RSVP(full_name="Carla Díaz", guests_count=3, phone="555-0303",
             notes=None, attending=True, created_at=base + timedelta(days=2)),
    ]
    async with AsyncSessionLocal() as session:
        await session.execute(delete(RSVP))
        session.add_all(rsvps)
        await session.commit()
    return rsvps


@pytest.fixture
def guest_rows():
    """Plain GuestRSVP rows for renderer tests (no database)."""
    return [
        GuestRSVP(full_name="Ana López", guests_count=2, phone="555-0101",
                  notes="Vegetariana", attending=True),
        GuestRSVP(full_name="Beto Ruiz", guests_count=float("nan"), phone=None,
                  notes=None, attending=False),
        GuestRSVP(full_name="Carla Díaz", guests_count=3, phone="555-0303",
                  notes=None, attending=True),
    ]


# --- Fake rendering engine ---

class FakePage:
    def __init__(self, fail_on=None, pdf_bytes=b"%PDF-1.7\n% fake guest list\n"):
        self.fail_on = fail_on
        self.pdf_bytes = pdf_bytes
        self.html = None
        self.wait_until = None
        self.pdf_options = None

    async def set_content(self, html, wait_until=None):
        self.html = html
        self.wait_until = wait_until
        if self.fail_on == "load":
            raise RuntimeError("page load failed")

    async def pdf(self, **options):
        self.pdf_options = options
        if self.fail_on == "export":
            raise RuntimeError("export failed")
        return self.pdf_bytes


class FakeBrowser:
    def __init__(self, page, fail_close=False):
        self.page = page
        self.fail_close = fail_close
        self.close_calls = 0
        self.new_page_kwargs = None

    async def new_page(self, **kwargs):
        self.new_page_kwargs = kwargs
        return self.page

    async def close(self):
        self.close_calls += 1
        if self.fail_close:
            raise RuntimeError("browser already gone")


class FakeEngine:
    """Stand-in for PlaywrightEngine: launch() -> FakeBrowser, stop()."""

    def __init__(self, fail_on=None, fail_close=False, pdf_bytes=b"%PDF-1.7\n% fake guest list\n"):
        self.fail_on = fail_on
        self.page = FakePage(fail_on=fail_on, pdf_bytes=pdf_bytes)
        self.browser = FakeBrowser(self.page, fail_close=fail_close)
        self.launched_with = None
        self.stop_calls = 0

    async def launch(self, profile):
        self.launched_with = profile
        if self.fail_on == "launch":
            raise RuntimeError("chromium executable not found")
        return self.browser

    async def stop(self):
        self.stop_calls += 1


@pytest.fixture
def fake_engine():
    """Factory: fake_engine(fail_on="export") etc."""
    return FakeEngine
