"""
Database connection and session management.

Key concepts:
- We use SQLAlchemy 2.0's async API (asyncpg in production, aiosqlite
  in tests)
- AsyncSession gives us non-blocking database calls
- get_db() is a "dependency" that FastAPI injects into route handlers:
  it provides a session and ensures cleanup after each request
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import NullPool

from app.config import settings


def _engine_options(url: str) -> dict:
    """Pool sizing only applies to server databases.

    SQLite (used by the test suite) gets a fresh connection per session,
    so no connection outlives the event loop that opened it.
    """
    options = {"echo": settings.DEBUG}
    if url.startswith("sqlite"):
        options["poolclass"] = NullPool
    else:
        options.update(pool_size=5, max_overflow=10, pool_pre_ping=True)
    return options


engine = create_async_engine(
    settings.DATABASE_URL,
    **_engine_options(settings.DATABASE_URL),
)

# expire_on_commit=False keeps objects usable after commit (lazy loads
# fail under async)
AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db():
    """FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Create all tables defined by our models.

    Called once at startup. The schema is two tables, so create_all is
    enough; there is no migration history to manage.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
