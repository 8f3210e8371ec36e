# tests/test_reviews.py

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.core.exceptions import NotFound, PermissionDenied, StateError, ValidationError
from app.models.review import Review
from app.services import booking_service, profile_service, review_service
from tests.conftest import caller_for, in_days


def _completed_booking(db, student, teacher, lesson):
    booking = booking_service.create_booking(
        db, caller_for(student), lesson.id, student.id, in_days(1)
    )
    booking_service.update_status(db, caller_for(teacher), booking.id, "confirmed")
    booking_service.update_status(db, caller_for(teacher), booking.id, "completed")
    return booking


def _review(db, student, booking, rating, comment=None):
    return review_service.submit_review(
        db, caller_for(student), booking.id, student.id, rating, comment
    )


class TestSubmitReview:
    def test_review_sets_teacher_rating(self, db, student, teacher, lesson):
        booking = _completed_booking(db, student, teacher, lesson)
        review = _review(db, student, booking, 4, "Clear explanations")

        assert review.teacher_id == teacher.id
        db.refresh(teacher)
        assert teacher.rating == Decimal("4.00")

    def test_rating_is_mean_of_reviews(self, db, student, make_profile, teacher, lesson):
        other = make_profile("student")
        _review(db, student, _completed_booking(db, student, teacher, lesson), 5)
        _review(db, other, _completed_booking(db, other, teacher, lesson), 4)
        _review(db, student, _completed_booking(db, student, teacher, lesson), 4)

        db.refresh(teacher)
        assert teacher.rating == Decimal("4.33")

    def test_second_review_updates_first(self, db, student, teacher, lesson):
        booking = _completed_booking(db, student, teacher, lesson)
        first = _review(db, student, booking, 2)
        second = _review(db, student, booking, 5, "Better second time")

        assert second.id == first.id
        assert db.query(Review).filter(Review.booking_id == booking.id).count() == 1
        db.refresh(teacher)
        assert teacher.rating == Decimal("5.00")

    @pytest.mark.parametrize("status", ["pending", "confirmed", "cancelled"])
    def test_requires_completed_booking(self, db, student, teacher, lesson, status):
        booking = booking_service.create_booking(
            db, caller_for(student), lesson.id, student.id, in_days(1)
        )
        if status == "confirmed":
            booking_service.update_status(db, caller_for(teacher), booking.id, "confirmed")
        elif status == "cancelled":
            booking_service.update_status(db, caller_for(teacher), booking.id, "cancelled")

        with pytest.raises(StateError):
            _review(db, student, booking, 5)
        assert db.query(Review).count() == 0

    @pytest.mark.parametrize("rating", [0, 6, -1, True, 4.5])
    def test_rating_out_of_range(self, db, student, teacher, lesson, rating):
        booking = _completed_booking(db, student, teacher, lesson)
        with pytest.raises(ValidationError):
            _review(db, student, booking, rating)

    def test_only_the_bookings_student(self, db, student, make_profile, teacher, lesson):
        booking = _completed_booking(db, student, teacher, lesson)
        with pytest.raises(PermissionDenied):
            _review(db, make_profile("student"), booking, 5)
        with pytest.raises(PermissionDenied):
            _review(db, teacher, booking, 5)

    def test_unknown_booking(self, db, student):
        with pytest.raises(NotFound):
            review_service.submit_review(
                db, caller_for(student), uuid.uuid4(), student.id, 3
            )


class TestRatingRecompute:
    def test_zero_without_reviews(self, db, teacher):
        assert profile_service.recompute_teacher_rating(db, teacher.id) == Decimal("0.00")
        assert teacher.rating == Decimal("0.00")

    def test_reviews_listed_per_teacher(self, db, student, teacher, make_profile, lesson):
        _review(db, student, _completed_booking(db, student, teacher, lesson), 3)
        assert len(review_service.list_teacher_reviews(db, teacher.id)) == 1
        assert review_service.list_teacher_reviews(db, make_profile("teacher").id) == []

    def test_recompute_touches_updated_at(self, db, student, teacher, lesson):
        booking = _completed_booking(db, student, teacher, lesson)
        long_ago = datetime(2020, 1, 1, tzinfo=timezone.utc)
        teacher.updated_at = long_ago
        db.flush()

        _review(db, student, booking, 5)

        assert teacher.updated_at.tzinfo is not None
        assert teacher.updated_at > long_ago

    def test_review_rejected_once_booking_cancelled(self, db, student, teacher, lesson):
        booking = booking_service.create_booking(
            db, caller_for(student), lesson.id, student.id, in_days(1)
        )
        booking_service.update_status(db, caller_for(teacher), booking.id, "cancelled")
        with pytest.raises(StateError):
            _review(db, student, booking, 4)
