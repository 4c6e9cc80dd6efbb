"""
User Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class UserCreate(BaseModel):
    """Schema for syncing a user from the identity provider."""
    id: str = Field(..., min_length=1, max_length=128, description="Identity provider UID")
    email: str = Field(..., min_length=3, max_length=255)
    display_name: str = Field(..., min_length=1, max_length=255)
    photo_url: Optional[str] = Field(None, max_length=1024)


class UserUpdate(BaseModel):
    """Schema for updating mutable profile fields."""
    display_name: Optional[str] = Field(None, min_length=1, max_length=255)
    photo_url: Optional[str] = Field(None, max_length=1024)


class UserResponse(BaseModel):
    """Schema for user response."""
    id: str
    email: str
    display_name: str
    photo_url: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
