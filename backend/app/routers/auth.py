"""
Admin authentication endpoints.

1. POST /api/login: form login; sets the session cookie and redirects
2. POST /api/admin/create-user: creates an admin, guarded by the
   bootstrap token from ADMIN_BOOTSTRAP_TOKEN

Login always answers with a 303 redirect (never 200) so the browser
doesn't offer to resubmit the form on refresh.
"""

import hmac
import logging

from fastapi import APIRouter, Depends, Form, Header, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models import AdminUser
from app.schemas.auth import CreateUserResponse
from app.services.auth import authenticate, create_session_token, hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login")
async def login(
    email: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    """Check admin credentials and start a session."""
    try:
        user = await authenticate(db, email, password)
    except Exception as e:
        logger.error("Login error: %s", e, exc_info=True)
        return RedirectResponse("/login?error=server", status_code=303)

    if user is None:
        logger.info("Failed login", extra={"email": email})
        return RedirectResponse("/login?error=invalid", status_code=303)

    response = RedirectResponse("/admin", status_code=303)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_token(user),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return response


@router.post("/admin/create-user", response_model=CreateUserResponse)
async def create_admin_user(
    request: Request,
    x_admin_token: str = Header(""),
    db: AsyncSession = Depends(get_db),
):
    """Create an admin account.

    Only works when ADMIN_BOOTSTRAP_TOKEN is configured and the request
    carries the same value in the x-admin-token header.
    """
    expected = settings.ADMIN_BOOTSTRAP_TOKEN
    if not expected or not hmac.compare_digest(x_admin_token.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        body = await request.json()
    except ValueError:
        body = None
    email = body.get("email") if isinstance(body, dict) else None
    password = body.get("password") if isinstance(body, dict) else None

    if not email or not password:
        raise HTTPException(status_code=400, detail="Missing email/password")

    email = str(email).strip().lower()
    existing = await db.execute(select(AdminUser).where(AdminUser.email == email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="A user with this email already exists")

    user = AdminUser(email=email, password_hash=hash_password(str(password)))
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Admin user created", extra={"email": email})
    return CreateUserResponse(userId=user.id)
