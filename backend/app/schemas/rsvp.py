"""
Pydantic schemas for the RSVP API.
"""

from typing import Optional

from pydantic import BaseModel, Field


class RSVPSubmission(BaseModel):
    """A validated RSVP, ready to insert."""
    full_name: str = Field(min_length=1, max_length=200)
    attending: bool = False
    guests_count: int = Field(ge=0, le=10)
    phone: Optional[str] = None
    notes: Optional[str] = None


class RSVPCreatedResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
