# app/services/stats_service.py
# Public platform counters. Read-only, no caller needed.

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.lesson import Lesson, Subject
from app.models.profile import Profile
from app.schemas.stats import PlatformStats


def _count_profiles(db: Session, user_type: str) -> int:
    return db.query(func.count(Profile.id)).filter(Profile.user_type == user_type).scalar() or 0


def get_platform_stats(db: Session) -> PlatformStats:
    """Teacher and student headcounts, active lessons, and subjects."""
    active_lessons = (
        db.query(func.count(Lesson.id)).filter(Lesson.is_active.is_(True)).scalar() or 0
    )
    subjects = db.query(func.count(Subject.id)).scalar() or 0
    return PlatformStats(
        teachers=_count_profiles(db, "teacher"),
        students=_count_profiles(db, "student"),
        active_lessons=active_lessons,
        subjects=subjects,
    )
