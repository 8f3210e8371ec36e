# app/schemas/profile.py
# Pydantic request/response models for identity bootstrap and profile endpoints.
#
#   IdentityEvent       -- body posted by the identity provider on registration
#   ProfileResponse     -- any profile (open visibility)
#   ProfileUpdate       -- PATCH /profiles/{id} body (self or admin)
#
# Derived fields (rating, total_students, total_lessons) are response-only.

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.transaction import MAX_AMOUNT


# ── Identity bootstrap ────────────────────────────────────────────────────────

class IdentityMetadata(BaseModel):
    full_name: Optional[str] = Field(None, max_length=100)
    user_type: Optional[str] = None   # validated by the identity service


class IdentityEvent(BaseModel):
    """New-identity event emitted by the authentication provider."""
    id: UUID
    email: EmailStr
    metadata: IdentityMetadata = Field(default_factory=IdentityMetadata)


# ── Profile ───────────────────────────────────────────────────────────────────

class ProfileResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    avatar_url: Optional[str] = None
    user_type: str
    phone: Optional[str] = None
    bio: Optional[str] = None
    experience_years: int
    hourly_rate: Decimal
    is_verified: bool
    rating: float
    total_students: int
    total_lessons: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """
    Fields a user can change on their own profile.
    user_type / is_verified are honoured only when the caller is an admin.
    """
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    bio: Optional[str] = None
    experience_years: Optional[int] = None
    hourly_rate: Optional[Decimal] = Field(None, le=MAX_AMOUNT)
    user_type: Optional[Literal["teacher", "student", "admin"]] = None
    is_verified: Optional[bool] = None

    @field_validator("full_name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v.strip()
            if len(v) < 2:
                raise ValueError("Full name must be at least 2 characters")
            if len(v) > 100:
                raise ValueError("Full name must be 100 characters or fewer")
        return v

    @field_validator("experience_years")
    @classmethod
    def valid_experience(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and (v < 0 or v > 60):
            raise ValueError("Experience years must be between 0 and 60")
        return v

    @field_validator("hourly_rate")
    @classmethod
    def valid_rate(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Hourly rate cannot be negative")
        return v


class MessageResponse(BaseModel):
    message: str
