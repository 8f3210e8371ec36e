# app/schemas/review.py
# Pydantic request/response models for reviews

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class ReviewCreate(BaseModel):
    """
    Student reviews a completed booking. student_id comes from the token.
    The 1..5 range is enforced by the review service (ValidationError).
    """
    booking_id: UUID
    rating: int
    comment: Optional[str] = None


class ReviewResponse(BaseModel):
    id: UUID
    booking_id: UUID
    student_id: UUID
    teacher_id: UUID
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
