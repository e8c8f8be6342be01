"""
Pydantic schemas for the admin bootstrap API.
"""

from pydantic import BaseModel


class CreateUserResponse(BaseModel):
    """The id of the admin that was just created."""
    userId: int
