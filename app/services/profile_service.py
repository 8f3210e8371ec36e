# app/services/profile_service.py
# Profile reads/updates and the teacher-stat recomputations
#
# rating / total_students / total_lessons are derived state: only
# recompute_teacher_rating() and refresh_teacher_totals() write them, and
# both lock the teacher row first so concurrent writers for the same teacher
# serialise.

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core import policy
from app.core.caller import Caller
from app.core.exceptions import NotFound
from app.models.booking import Booking
from app.models.profile import Profile
from app.models.review import Review
from app.schemas.profile import ProfileUpdate

logger = logging.getLogger("tutorhub.profiles")

ADMIN_ONLY_FIELDS = ("user_type", "is_verified")
NULLABLE_FIELDS = ("avatar_url", "phone", "bio")

CENT = Decimal("0.01")


def get_profile(db: Session, caller: Caller, profile_id: UUID) -> Profile:
    profile = db.get(Profile, profile_id)
    if not profile or not policy.can_read_profile(caller, profile):
        raise NotFound("Profile not found.")
    return profile


def list_teachers(db: Session, verified_only: bool = False) -> List[Profile]:
    query = db.query(Profile).filter(Profile.user_type == "teacher")
    if verified_only:
        query = query.filter(Profile.is_verified == True)  # noqa: E712
    return query.order_by(Profile.rating.desc(), Profile.full_name).all()


def update_profile(
    db: Session, caller: Caller, profile_id: UUID, changes: ProfileUpdate
) -> Profile:
    """
    Self or admin. Admin-only fields sent by a non-admin are rejected outright
    rather than silently dropped.
    """
    profile = get_profile(db, caller, profile_id)
    policy.authorize(
        policy.can_write_profile(caller, profile),
        "You can only edit your own profile.",
    )

    data = changes.model_dump(exclude_unset=True)
    admin_fields = [f for f in ADMIN_ONLY_FIELDS if f in data]
    policy.authorize(
        not admin_fields or caller.is_admin,
        f"Only an admin can change: {', '.join(admin_fields)}.",
    )

    for field, value in data.items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(profile, field, value)

    db.flush()
    return profile


# ── Derived teacher stats ─────────────────────────────────────────────────────

def _lock_teacher(db: Session, teacher_id: UUID) -> Profile:
    """SELECT ... FOR UPDATE on the teacher row (no-op lock on SQLite)."""
    # populate_existing() would discard unflushed edits to this row
    db.flush()
    teacher = (
        db.query(Profile)
        .filter(Profile.id == teacher_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not teacher:
        raise NotFound("Teacher profile not found.")
    return teacher


def recompute_teacher_rating(db: Session, teacher_id: UUID) -> Decimal:
    """
    rating = mean of every review the teacher has received, 0 when none.
    Recomputed from source inside the caller's transaction -- never
    incremented -- so a stale read cannot lose an update.
    """
    teacher = _lock_teacher(db, teacher_id)

    average = db.query(func.avg(Review.rating)).filter(
        Review.teacher_id == teacher_id
    ).scalar()
    rating = Decimal(str(average or 0)).quantize(CENT, rounding=ROUND_HALF_UP)

    teacher.rating = rating
    teacher.updated_at = datetime.now(timezone.utc)
    db.flush()

    logger.info("Teacher rating recomputed teacher=%s rating=%s", teacher_id, rating)
    return rating


def refresh_teacher_totals(db: Session, teacher_id: UUID) -> Profile:
    """total_lessons / total_students over the teacher's completed bookings."""
    teacher = _lock_teacher(db, teacher_id)

    completed = db.query(Booking).filter(
        Booking.teacher_id == teacher_id,
        Booking.status == "completed",
    )
    teacher.total_lessons = completed.count()
    teacher.total_students = completed.with_entities(
        func.count(func.distinct(Booking.student_id))
    ).scalar() or 0
    db.flush()
    return teacher
