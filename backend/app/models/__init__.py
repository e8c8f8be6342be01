from app.database import Base
from app.models.models import AdminUser, RSVP

__all__ = [
    "Base",
    "RSVP",
    "AdminUser",
]
