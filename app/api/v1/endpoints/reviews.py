# app/api/v1/endpoints/reviews.py
# Review endpoints
#
#   POST /reviews/        → student reviews a completed booking (resubmitting edits it)
#   GET  /reviews/{id}    → public

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.caller import Caller
from app.core.dependencies import get_optional_caller, require_caller
from app.db.session import get_db
from app.schemas.review import ReviewCreate, ReviewResponse
from app.services import review_service

router = APIRouter()


@router.post(
    "/",
    response_model=ReviewResponse,
    status_code=201,
    summary="Student reviews a completed lesson",
)
def submit_review(
    payload: ReviewCreate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    """
    403 if the caller is not the booking's student, 409 if the booking is
    not completed yet, 422 if the rating is outside 1..5.
    The teacher's rating is updated in the same transaction.
    """
    return review_service.submit_review(
        db,
        caller,
        booking_id=payload.booking_id,
        student_id=caller.id,
        rating=payload.rating,
        comment=payload.comment,
    )


@router.get(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review (public)",
)
def get_review(
    review_id: UUID,
    caller: Caller = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    return review_service.get_review(db, caller, review_id)
