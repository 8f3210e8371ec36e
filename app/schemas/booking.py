# app/schemas/booking.py
# Pydantic request/response models for booking endpoints

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel

BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]


class BookingCreate(BaseModel):
    """Student reserves a lesson. student_id is taken from the token."""
    lesson_id: UUID
    scheduled_at: datetime
    notes: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingDetailsUpdate(BaseModel):
    meeting_link: Optional[str] = None
    notes: Optional[str] = None


class BookingResponse(BaseModel):
    id: UUID
    lesson_id: UUID
    student_id: UUID
    teacher_id: UUID
    scheduled_at: datetime
    status: str
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
