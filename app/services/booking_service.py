# app/services/booking_service.py
# Booking lifecycle
#
#   pending ──► confirmed ──► completed
#      │            │
#      └────────────┴──► cancelled
#
# completed and cancelled are terminal. Any other move is a StateError.
# Reaching completed unlocks reviews and refreshes the teacher's totals.

import logging
from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core import policy
from app.core.caller import Caller
from app.core.exceptions import NotFound, StateError, ValidationError
from app.models.booking import BOOKING_STATUSES, Booking
from app.models.lesson import Lesson
from app.services import profile_service

logger = logging.getLogger("tutorhub.bookings")

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}
TERMINAL_STATUSES = frozenset(s for s, nxt in ALLOWED_TRANSITIONS.items() if not nxt)


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def lock_booking(db: Session, booking_id: UUID) -> Booking:
    """SELECT ... FOR UPDATE on the booking, re-reading its current state."""
    db.flush()
    booking = (
        db.query(Booking)
        .filter(Booking.id == booking_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not booking:
        raise NotFound("Booking not found.")
    return booking


def create_booking(
    db: Session,
    caller: Caller,
    lesson_id: UUID,
    student_id: UUID,
    scheduled_at: datetime,
    notes: Optional[str] = None,
) -> Booking:
    policy.authorize(
        policy.can_create_booking(caller, student_id),
        "Bookings can only be made by the student themselves.",
    )
    if scheduled_at is None:
        raise ValidationError("scheduled_at is required.")

    lesson = db.get(Lesson, lesson_id)
    if not lesson:
        raise NotFound("Lesson not found.")
    if not lesson.is_active:
        raise StateError("This lesson is no longer offered.", details={"lesson_id": str(lesson_id)})
    if lesson.teacher_id == student_id:
        raise ValidationError("You cannot book your own lesson.")

    booking = Booking(
        lesson_id=lesson.id,
        student_id=student_id,
        teacher_id=lesson.teacher_id,
        scheduled_at=scheduled_at,
        status="pending",
        notes=notes,
    )
    db.add(booking)
    db.flush()

    logger.info("Booking created id=%s lesson=%s student=%s", booking.id, lesson.id, student_id)
    return booking


def get_booking(db: Session, caller: Caller, booking_id: UUID) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFound("Booking not found.")
    policy.authorize(
        policy.can_read_booking(caller, booking),
        "You are not a participant in this booking.",
    )
    return booking


def list_bookings(db: Session, caller: Caller, status: Optional[str] = None) -> List[Booking]:
    """Students see their bookings, teachers theirs, admins everything."""
    if status is not None and status not in BOOKING_STATUSES:
        raise ValidationError(
            f"Invalid booking status '{status}'.",
            details={"allowed": list(BOOKING_STATUSES)},
        )

    query = db.query(Booking)
    if not caller.is_admin:
        policy.authorize(caller.is_authenticated, "Authentication required.")
        query = query.filter(
            (Booking.student_id == caller.id) | (Booking.teacher_id == caller.id)
        )
    if status is not None:
        query = query.filter(Booking.status == status)
    return query.order_by(Booking.scheduled_at.desc()).all()


def update_status(db: Session, caller: Caller, booking_id: UUID, new_status: str) -> Booking:
    if new_status not in BOOKING_STATUSES:
        raise ValidationError(
            f"Invalid booking status '{new_status}'.",
            details={"allowed": list(BOOKING_STATUSES)},
        )

    booking = lock_booking(db, booking_id)
    policy.authorize(
        policy.can_write_booking(caller, booking),
        "Only the booking's student or teacher can change its status.",
    )

    old_status = booking.status
    if not can_transition(old_status, new_status):
        raise StateError(
            f"Cannot move a booking from '{old_status}' to '{new_status}'.",
            details={
                "current": old_status,
                "requested": new_status,
                "allowed": sorted(ALLOWED_TRANSITIONS.get(old_status, ())),
            },
        )

    # Compare-and-set against the status checked above (SQLite ignores FOR UPDATE)
    result = db.execute(
        update(Booking)
        .where(Booking.id == booking.id, Booking.status == old_status)
        .values(status=new_status, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.expire(booking)
        raise StateError(
            "Booking status changed concurrently, reload and retry.",
            details={"expected": old_status, "requested": new_status},
        )
    db.refresh(booking)

    if new_status == "completed":
        profile_service.refresh_teacher_totals(db, booking.teacher_id)

    logger.info("Booking %s status %s -> %s by %s", booking.id, old_status, new_status, caller.id)
    return booking


def update_booking_details(
    db: Session,
    caller: Caller,
    booking_id: UUID,
    meeting_link: Optional[str] = None,
    notes: Optional[str] = None,
) -> Booking:
    booking = lock_booking(db, booking_id)
    policy.authorize(
        policy.can_write_booking(caller, booking),
        "Only the booking's student or teacher can edit it.",
    )
    if booking.status in TERMINAL_STATUSES:
        raise StateError(f"Booking is already {booking.status}.")

    if meeting_link is not None:
        booking.meeting_link = meeting_link
    if notes is not None:
        booking.notes = notes
    db.flush()
    return booking
