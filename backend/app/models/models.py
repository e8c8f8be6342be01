"""
SQLAlchemy ORM models.

Two tables:
- rsvps: one row per RSVP submitted through the public form
- admin_users: people allowed to log in and export the guest list

Column types are kept portable (no PostgreSQL-only types) so the same
models run against SQLite in the test suite.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class RSVP(Base):
    """A guest's answer to the invitation."""

    __tablename__ = "rsvps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    guests_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    attending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False,
    )

    def __repr__(self) -> str:
        return f"<RSVP id={self.id} full_name={self.full_name!r} attending={self.attending}>"


class AdminUser(Base):
    """An administrator who can download the guest list."""

    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AdminUser id={self.id} email={self.email!r}>"
