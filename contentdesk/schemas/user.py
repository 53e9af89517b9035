from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, HttpUrl, field_validator

from contentdesk.schemas.base import ORMModel


class UserProfile(ORMModel):
    id: int
    email: str
    full_name: Optional[str] = None
    bio: Optional[str] = None
    company: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserProfileUpdate(ORMModel):
    """Omitted fields are left alone; ``null`` clears the optional ones."""

    full_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    company: Optional[str] = Field(default=None, max_length=100)
    website: Optional[HttpUrl] = None
    phone: Optional[str] = Field(default=None, max_length=50)

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value
