"""
Admin authentication helpers.

- Passwords are stored as PBKDF2-SHA256 hashes:
  "pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>"
- A successful login issues a signed JWT (HS256, SECRET_KEY) that the
  browser keeps in an httponly cookie; require_admin checks it on every
  export request.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import AdminUser

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ITERATIONS = 310_000
JWT_ALGORITHM = "HS256"


def hash_password(password: str, iterations: int = HASH_ITERATIONS) -> str:
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{HASH_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check of a password against a stored hash."""
    try:
        algorithm, iterations, salt_hex, digest_hex = password_hash.split("$")
        if algorithm != HASH_ALGORITHM:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(iterations),
        )
    except ValueError:
        # Malformed hash in the database
        return False
    return hmac.compare_digest(digest.hex(), digest_hex)


async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[AdminUser]:
    """Return the admin for these credentials, or None."""
    if not email or not password:
        return None

    result = await db.execute(
        select(AdminUser).where(AdminUser.email == email.strip().lower())
    )
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def create_session_token(user: AdminUser, max_age: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "iat": now,
        "exp": now + timedelta(seconds=max_age or settings.SESSION_MAX_AGE_SECONDS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_session_token(token: str) -> Optional[dict]:
    """Decoded payload, or None if the token is invalid or expired."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Session token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid session token: %s", e)
        return None


async def require_admin(request: Request) -> dict:
    """FastAPI dependency: 401 unless the request has a valid session cookie."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    payload = decode_session_token(token) if token else None
    if payload is None:
        raise HTTPException(status_code=401, detail="No autorizado")
    return payload
