# app/models/profile.py
# Platform account for every role: student | teacher | admin
# The primary key IS the identity id issued by the auth provider --
# a profile is created once by the identity bootstrap, never by clients.

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base_class import Base

USER_TYPES = ("teacher", "student", "admin")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True)

    # ── Identity ──────────────────────────────────────────────────────────────
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=False)
    avatar_url = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)

    # ── Role ──────────────────────────────────────────────────────────────────
    user_type = Column(
        Enum(*USER_TYPES, name="user_type_enum"),
        nullable=False,
        default="student",
        index=True,
    )

    # ── Teacher fields (unconstrained for other roles) ───────────────────────
    bio = Column(Text, nullable=True)
    experience_years = Column(Integer, nullable=False, default=0)
    hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)
    # Set by admin only
    is_verified = Column(Boolean, nullable=False, default=False, index=True)

    # ── Stats (derived -- written by review/booking services only) ────────────
    rating = Column(Numeric(3, 2), nullable=False, default=0, index=True)
    total_students = Column(Integer, nullable=False, default=0)
    total_lessons = Column(Integer, nullable=False, default=0)

    # ── Timestamps ────────────────────────────────────────────────────────────
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
    lessons = relationship(
        "Lesson", back_populates="teacher", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id} email={self.email} user_type={self.user_type}>"
