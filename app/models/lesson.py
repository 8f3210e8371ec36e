# app/models/lesson.py
# Catalog: subjects, teacher-owned lessons and their attached materials
#
# Lessons are soft-deactivated (is_active=False) rather than deleted;
# they only disappear through cascade when the owning teacher is removed.

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base_class import Base

DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced")


class Subject(Base):
    """Academic subject. Admin-managed, referenced by lessons."""
    __tablename__ = "subjects"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    icon_name = Column(String(50), nullable=True)   # front-end icon tag e.g. "Calculator"

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    lessons = relationship("Lesson", back_populates="subject", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Subject name={self.name}>"


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject_id = Column(
        UUID(as_uuid=True),
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── Offering ──────────────────────────────────────────────────────────────
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=60)
    price = Column(Numeric(10, 2), nullable=False)
    max_students = Column(Integer, nullable=False, default=1)
    difficulty_level = Column(
        Enum(*DIFFICULTY_LEVELS, name="difficulty_level_enum"),
        nullable=False,
        default="beginner",
    )
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    teacher = relationship("Profile", back_populates="lessons")
    subject = relationship("Subject", back_populates="lessons")
    materials = relationship(
        "LessonMaterial", back_populates="lesson", cascade="all, delete-orphan", passive_deletes=True
    )
    bookings = relationship(
        "Booking", back_populates="lesson", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Lesson id={self.id} teacher={self.teacher_id} active={self.is_active}>"


class LessonMaterial(Base):
    """File attached to a lesson (slides, worksheets...). Owned by the lesson's teacher."""
    __tablename__ = "lesson_materials"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lesson_id = Column(
        UUID(as_uuid=True),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(200), nullable=False)
    file_url = Column(Text, nullable=True)
    file_type = Column(String(50), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    lesson = relationship("Lesson", back_populates="materials")

    def __repr__(self) -> str:
        return f"<LessonMaterial lesson={self.lesson_id} title={self.title}>"
