# app/core/policy.py
# Access policy layer -- one predicate per (entity, action).
#
#   Entity          Read                                  Write
#   Profile         anyone                                self or admin
#   Subject         anyone                                admin
#   Lesson          anyone if active, owner/admin always  owner
#   LessonMaterial  as its lesson                         lesson owner
#   Booking         participant or admin                  participant (create: the student)
#   Transaction     participant or admin                  system or admin
#   Review          anyone                                the booking's student, completed booking only
#
# Predicates only read attributes off the rows they are given, so they can be
# exercised without a database. Services call authorize() before any write.

from typing import Optional
from uuid import UUID

from app.core.caller import Caller
from app.core.exceptions import PermissionDenied


def authorize(allowed: bool, message: str = "You are not allowed to perform this action.") -> None:
    if not allowed:
        raise PermissionDenied(message)


# ── Profile ───────────────────────────────────────────────────────────────────
# Open visibility: every profile is readable by everyone.

def can_read_profile(caller: Caller, profile) -> bool:
    return True


def can_write_profile(caller: Caller, profile) -> bool:
    return caller.is_admin or caller.is_(profile.id)


# ── Subject ───────────────────────────────────────────────────────────────────

def can_write_subject(caller: Caller) -> bool:
    return caller.is_admin


# ── Lesson ────────────────────────────────────────────────────────────────────

def can_read_lesson(caller: Caller, lesson) -> bool:
    return bool(lesson.is_active) or caller.is_admin or caller.is_(lesson.teacher_id)


def can_create_lesson(caller: Caller, teacher_id: UUID) -> bool:
    return caller.role == "teacher" and caller.is_(teacher_id)


def can_write_lesson(caller: Caller, lesson) -> bool:
    return caller.is_(lesson.teacher_id)


def can_read_material(caller: Caller, lesson) -> bool:
    return can_read_lesson(caller, lesson)


def can_write_material(caller: Caller, lesson) -> bool:
    return can_write_lesson(caller, lesson)


# ── Booking ───────────────────────────────────────────────────────────────────

def is_participant(caller: Caller, row) -> bool:
    """True when the caller is the student or the teacher on a booking-like row."""
    return caller.is_(row.student_id) or caller.is_(row.teacher_id)


def can_read_booking(caller: Caller, booking) -> bool:
    return caller.is_admin or is_participant(caller, booking)


def can_create_booking(caller: Caller, student_id: UUID) -> bool:
    return caller.is_(student_id)


def can_write_booking(caller: Caller, booking) -> bool:
    return is_participant(caller, booking)


# ── Transaction ───────────────────────────────────────────────────────────────

def can_read_transaction(caller: Caller, transaction) -> bool:
    return caller.is_admin or is_participant(caller, transaction)


def can_write_transaction(caller: Caller) -> bool:
    return caller.is_system or caller.is_admin


# ── Review ────────────────────────────────────────────────────────────────────

def can_read_review(caller: Caller, review) -> bool:
    return True


def can_write_review(caller: Caller, booking, student_id: Optional[UUID] = None) -> bool:
    """
    The reviewer must be the booking's student. Lifecycle (status == completed)
    is checked separately by the review service so it can raise StateError.
    """
    if student_id is not None and not caller.is_(student_id):
        return False
    return caller.is_(booking.student_id)
