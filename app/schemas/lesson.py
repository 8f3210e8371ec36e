# app/schemas/lesson.py
# Pydantic request/response models for subjects, lessons and lesson materials

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.transaction import MAX_AMOUNT

Difficulty = Literal["beginner", "intermediate", "advanced"]


# ── Subjects ──────────────────────────────────────────────────────────────────

class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    icon_name: Optional[str] = Field(None, max_length=50)


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    icon_name: Optional[str] = Field(None, max_length=50)


class SubjectResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    icon_name: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Lessons ───────────────────────────────────────────────────────────────────

class LessonCreate(BaseModel):
    """Teacher publishes a lesson. teacher_id is taken from the token."""
    subject_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    duration_minutes: int = Field(60, gt=0)
    price: Decimal = Field(..., ge=0, le=MAX_AMOUNT)
    max_students: int = Field(1, gt=0)
    difficulty_level: Difficulty = "beginner"


class LessonUpdate(BaseModel):
    subject_id: Optional[UUID] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    duration_minutes: Optional[int] = Field(None, gt=0)
    price: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT)
    max_students: Optional[int] = Field(None, gt=0)
    difficulty_level: Optional[Difficulty] = None
    is_active: Optional[bool] = None


class LessonResponse(BaseModel):
    id: UUID
    teacher_id: UUID
    subject_id: UUID
    title: str
    description: str
    duration_minutes: int
    price: Decimal
    max_students: int
    difficulty_level: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ── Materials ─────────────────────────────────────────────────────────────────

class MaterialCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    file_url: Optional[str] = None
    file_type: Optional[str] = Field(None, max_length=50)


class MaterialResponse(BaseModel):
    id: UUID
    lesson_id: UUID
    title: str
    file_url: Optional[str] = None
    file_type: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
