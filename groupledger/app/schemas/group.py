"""
Group and membership Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from groupledger.app.models.enums import GroupType
from groupledger.app.schemas.user import UserResponse


class GroupCreate(BaseModel):
    """Schema for creating a new group. The code is generated when omitted."""
    name: str = Field(..., min_length=1, max_length=200, description="Group name")
    type: GroupType = GroupType.OTHER
    created_by: str = Field(..., min_length=1, max_length=128)
    code: Optional[str] = Field(None, min_length=4, max_length=32)


class GroupResponse(BaseModel):
    """Schema for group response."""
    id: int
    name: str
    type: GroupType
    code: str
    created_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class GroupMemberCreate(BaseModel):
    """Schema for joining a group."""
    group_id: int = Field(..., ge=1)
    user_id: str = Field(..., min_length=1, max_length=128)


class GroupMemberResponse(BaseModel):
    """Schema for a membership."""
    id: int
    group_id: int
    user_id: str
    joined_at: datetime

    class Config:
        from_attributes = True


class GroupMemberDetailResponse(GroupMemberResponse):
    """Membership with the member's profile."""
    user: Optional[UserResponse] = None
