# app/models/booking.py
# A student's reservation of a lesson slot
#
# Lifecycle (enforced in app/services/booking_service.py):
#   pending → confirmed → completed
#   pending | confirmed → cancelled
#
# teacher_id is copied from the lesson at creation so participant checks
# never need a join.

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base_class import Base

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lesson_id = Column(
        UUID(as_uuid=True),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id = Column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    teacher_id = Column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    scheduled_at = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(
        Enum(*BOOKING_STATUSES, name="booking_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )
    meeting_link = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

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
    lesson = relationship("Lesson", back_populates="bookings")
    transaction = relationship(
        "Transaction",
        back_populates="booking",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    review = relationship(
        "Review",
        back_populates="booking",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Booking id={self.id} lesson={self.lesson_id} status={self.status}>"
