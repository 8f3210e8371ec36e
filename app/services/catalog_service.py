# app/services/catalog_service.py
# Catalog store: subjects (admin), lessons and materials (owning teacher)
#
# Public listing only ever yields active lessons. Inactive lessons stay
# visible to their owner (and admins) and are reported as NotFound to
# everyone else, so their existence is not disclosed.

import logging
from decimal import Decimal
from typing import Iterator, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core import policy
from app.core.caller import Caller
from app.core.exceptions import ConflictError, NotFound, ValidationError
from app.models.lesson import DIFFICULTY_LEVELS, Lesson, LessonMaterial, Subject
from app.models.transaction import MAX_AMOUNT

logger = logging.getLogger("tutorhub.catalog")

LESSON_EDITABLE_FIELDS = (
    "subject_id",
    "title",
    "description",
    "duration_minutes",
    "price",
    "max_students",
    "difficulty_level",
    "is_active",
)


# ── Subjects ──────────────────────────────────────────────────────────────────

def list_subjects(db: Session) -> List[Subject]:
    return db.query(Subject).order_by(Subject.name).all()


def _get_subject(db: Session, subject_id: UUID) -> Subject:
    subject = db.get(Subject, subject_id)
    if not subject:
        raise NotFound("Subject not found.")
    return subject


def _ensure_subject_name_free(db: Session, name: str, exclude_id: Optional[UUID] = None) -> None:
    query = db.query(Subject).filter(Subject.name == name)
    if exclude_id is not None:
        query = query.filter(Subject.id != exclude_id)
    if query.first():
        raise ConflictError(f"Subject '{name}' already exists.")


def create_subject(
    db: Session,
    caller: Caller,
    name: str,
    description: Optional[str] = None,
    icon_name: Optional[str] = None,
) -> Subject:
    policy.authorize(policy.can_write_subject(caller), "Admin access required.")
    name = name.strip()
    if not name:
        raise ValidationError("Subject name is required.")
    _ensure_subject_name_free(db, name)

    subject = Subject(name=name, description=description, icon_name=icon_name)
    db.add(subject)
    try:
        db.flush()
    except IntegrityError as exc:
        raise ConflictError(f"Subject '{name}' already exists.") from exc
    return subject


def update_subject(db: Session, caller: Caller, subject_id: UUID, **changes) -> Subject:
    policy.authorize(policy.can_write_subject(caller), "Admin access required.")
    subject = _get_subject(db, subject_id)

    if changes.get("name") is not None:
        name = changes["name"].strip()
        if not name:
            raise ValidationError("Subject name is required.")
        _ensure_subject_name_free(db, name, exclude_id=subject.id)
        subject.name = name
    for field in ("description", "icon_name"):
        if field in changes:
            setattr(subject, field, changes[field])

    db.flush()
    return subject


# ── Lessons ───────────────────────────────────────────────────────────────────

def _validate_lesson_fields(fields: dict) -> None:
    if "difficulty_level" in fields and fields["difficulty_level"] not in DIFFICULTY_LEVELS:
        raise ValidationError(
            f"Invalid difficulty level '{fields['difficulty_level']}'.",
            details={"allowed": list(DIFFICULTY_LEVELS)},
        )
    for field in ("duration_minutes", "max_students"):
        if field in fields and (fields[field] is None or fields[field] <= 0):
            raise ValidationError(f"{field} must be a positive integer.")
    if "price" in fields and (fields["price"] is None or Decimal(fields["price"]) < 0):
        raise ValidationError("price cannot be negative.")
    if "price" in fields and Decimal(fields["price"]) > MAX_AMOUNT:
        raise ValidationError(f"price cannot exceed {MAX_AMOUNT}.")
    for field in ("title", "description"):
        if field in fields and not (fields[field] or "").strip():
            raise ValidationError(f"{field} is required.")


def create_lesson(
    db: Session,
    caller: Caller,
    teacher_id: UUID,
    subject_id: UUID,
    title: str,
    description: str,
    duration_minutes: int = 60,
    price: Decimal = Decimal("0"),
    max_students: int = 1,
    difficulty_level: str = "beginner",
) -> Lesson:
    policy.authorize(
        policy.can_create_lesson(caller, teacher_id),
        "Only the teacher themselves can publish lessons.",
    )
    fields = {
        "title": title,
        "description": description,
        "duration_minutes": duration_minutes,
        "price": price,
        "max_students": max_students,
        "difficulty_level": difficulty_level,
    }
    _validate_lesson_fields(fields)
    _get_subject(db, subject_id)

    lesson = Lesson(teacher_id=teacher_id, subject_id=subject_id, is_active=True, **fields)
    db.add(lesson)
    db.flush()

    logger.info("Lesson created id=%s teacher=%s", lesson.id, teacher_id)
    return lesson


def list_active_lessons(
    db: Session,
    subject_id: Optional[UUID] = None,
    difficulty: Optional[str] = None,
    batch_size: int = 100,
) -> Iterator[Lesson]:
    """
    Public catalogue. Filters are validated eagerly; rows are then streamed
    in batches as the returned iterator is consumed.
    """
    if difficulty is not None and difficulty not in DIFFICULTY_LEVELS:
        raise ValidationError(
            f"Invalid difficulty level '{difficulty}'.",
            details={"allowed": list(DIFFICULTY_LEVELS)},
        )

    query = db.query(Lesson).filter(Lesson.is_active == True)  # noqa: E712
    if subject_id is not None:
        query = query.filter(Lesson.subject_id == subject_id)
    if difficulty is not None:
        query = query.filter(Lesson.difficulty_level == difficulty)

    return iter(query.order_by(Lesson.created_at.desc()).yield_per(batch_size))


def get_lesson(db: Session, caller: Caller, lesson_id: UUID) -> Lesson:
    lesson = db.get(Lesson, lesson_id)
    if not lesson or not policy.can_read_lesson(caller, lesson):
        raise NotFound("Lesson not found.")
    return lesson


def list_teacher_lessons(db: Session, caller: Caller, teacher_id: UUID) -> List[Lesson]:
    """Owner and admins see everything; others only the active lessons."""
    query = db.query(Lesson).filter(Lesson.teacher_id == teacher_id)
    if not (caller.is_admin or caller.is_(teacher_id)):
        query = query.filter(Lesson.is_active == True)  # noqa: E712
    return query.order_by(Lesson.created_at.desc()).all()


def _get_owned_lesson(db: Session, caller: Caller, lesson_id: UUID) -> Lesson:
    lesson = get_lesson(db, caller, lesson_id)
    policy.authorize(
        policy.can_write_lesson(caller, lesson),
        "Only the lesson's teacher can modify it.",
    )
    return lesson


def update_lesson(db: Session, caller: Caller, lesson_id: UUID, **changes) -> Lesson:
    lesson = _get_owned_lesson(db, caller, lesson_id)

    fields = {k: v for k, v in changes.items() if k in LESSON_EDITABLE_FIELDS and v is not None}
    _validate_lesson_fields(fields)
    if "subject_id" in fields:
        _get_subject(db, fields["subject_id"])

    for field, value in fields.items():
        setattr(lesson, field, value)
    db.flush()
    return lesson


def deactivate_lesson(db: Session, caller: Caller, lesson_id: UUID) -> Lesson:
    lesson = _get_owned_lesson(db, caller, lesson_id)
    lesson.is_active = False
    db.flush()

    logger.info("Lesson deactivated id=%s", lesson.id)
    return lesson


# ── Materials ─────────────────────────────────────────────────────────────────

def list_materials(db: Session, caller: Caller, lesson_id: UUID) -> List[LessonMaterial]:
    lesson = db.get(Lesson, lesson_id)
    if not lesson or not policy.can_read_material(caller, lesson):
        raise NotFound("Lesson not found.")
    return (
        db.query(LessonMaterial)
        .filter(LessonMaterial.lesson_id == lesson.id)
        .order_by(LessonMaterial.created_at)
        .all()
    )


def add_material(
    db: Session,
    caller: Caller,
    lesson_id: UUID,
    title: str,
    file_url: Optional[str] = None,
    file_type: Optional[str] = None,
) -> LessonMaterial:
    lesson = get_lesson(db, caller, lesson_id)
    policy.authorize(
        policy.can_write_material(caller, lesson),
        "Only the lesson's teacher can manage its materials.",
    )
    if not (title or "").strip():
        raise ValidationError("title is required.")

    material = LessonMaterial(
        lesson_id=lesson.id, title=title.strip(), file_url=file_url, file_type=file_type
    )
    db.add(material)
    db.flush()
    return material


def delete_material(db: Session, caller: Caller, material_id: UUID) -> None:
    material = db.get(LessonMaterial, material_id)
    if not material:
        raise NotFound("Material not found.")
    lesson = get_lesson(db, caller, material.lesson_id)
    policy.authorize(
        policy.can_write_material(caller, lesson),
        "Only the lesson's teacher can manage its materials.",
    )
    db.delete(material)
    db.flush()
