# routetrack/Schemas/user.py

from pydantic import BaseModel, Field
from typing import Optional


class User_create(BaseModel):
    """
    Schema for registering a user.
    Used by the repository create_user() function and seeding scripts.
    """
    id: str = Field(..., min_length=1, max_length=100, description="Unique user identifier")
    email: Optional[str] = Field(None, max_length=255)
    name: Optional[str] = Field(None, max_length=200)
