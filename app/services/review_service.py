# app/services/review_service.py
# Reviews and the teacher rating aggregate
#
# A review needs: caller == the booking's student, booking status == completed.
# One review per booking -- a second submission edits the first, so each
# booking contributes exactly one rating. The teacher's rating is recomputed
# from all reviews in the same transaction as the write.

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core import policy
from app.core.caller import Caller
from app.core.exceptions import ConflictError, NotFound, StateError, ValidationError
from app.models.review import Review
from app.services import booking_service, profile_service

logger = logging.getLogger("tutorhub.reviews")

MIN_RATING = 1
MAX_RATING = 5


def _validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number.")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}.",
            details={"rating": rating},
        )
    return rating


def submit_review(
    db: Session,
    caller: Caller,
    booking_id: UUID,
    student_id: UUID,
    rating: int,
    comment: Optional[str] = None,
) -> Review:
    rating = _validate_rating(rating)

    booking = booking_service.lock_booking(db, booking_id)
    policy.authorize(
        policy.can_write_review(caller, booking, student_id),
        "Only the student who took this lesson can review it.",
    )
    if booking.status != "completed":
        raise StateError(
            "Reviews can only be left for completed lessons.",
            details={"status": booking.status},
        )

    review = (
        db.query(Review)
        .filter(Review.booking_id == booking.id)
        .with_for_update()
        .first()
    )
    created = review is None
    if created:
        review = Review(
            booking_id=booking.id,
            student_id=booking.student_id,
            teacher_id=booking.teacher_id,
            rating=rating,
            comment=comment,
        )
        db.add(review)
    else:
        review.rating = rating
        if comment is not None:
            review.comment = comment

    try:
        db.flush()
    except IntegrityError as exc:
        raise ConflictError(
            "This booking was reviewed concurrently, please retry.",
            details={"booking_id": str(booking_id)},
        ) from exc

    profile_service.recompute_teacher_rating(db, booking.teacher_id)

    logger.info(
        "Review %s booking=%s teacher=%s rating=%s",
        "created" if created else "updated",
        booking.id,
        booking.teacher_id,
        rating,
    )
    return review


def get_review(db: Session, caller: Caller, review_id: UUID) -> Review:
    review = db.get(Review, review_id)
    if not review or not policy.can_read_review(caller, review):
        raise NotFound("Review not found.")
    return review


def list_teacher_reviews(db: Session, teacher_id: UUID) -> List[Review]:
    return (
        db.query(Review)
        .filter(Review.teacher_id == teacher_id)
        .order_by(Review.created_at.desc())
        .all()
    )
