"""
Pydantic schemas for user profiles
"""
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime


class ProfileUpsert(BaseModel):
    """Create or update the caller's profile"""
    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., min_length=1)
    avatar_url: Optional[str] = None


class ProfileResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
