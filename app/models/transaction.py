# app/models/transaction.py
# Settled payment for a booking, split into platform commission and teacher payout
#
# platform_commission / teacher_amount are derived from total_amount by
# app/services/ledger_service.py on every write -- never set them directly.

import uuid
from decimal import Decimal
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    String,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base_class import Base

PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")

# Largest value a Numeric(10, 2) money column holds
MAX_AMOUNT = Decimal("99999999.99")


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(
        UUID(as_uuid=True),
        ForeignKey("bookings.id", ondelete="CASCADE"),
        unique=True,            # one settlement record per booking
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

    # ── Amounts ───────────────────────────────────────────────────────────────
    total_amount = Column(Numeric(10, 2), nullable=False)
    platform_commission = Column(Numeric(10, 2), nullable=False)
    teacher_amount = Column(Numeric(10, 2), nullable=False)

    # ── Payment ───────────────────────────────────────────────────────────────
    payment_status = Column(
        Enum(*PAYMENT_STATUSES, name="payment_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )
    payment_method = Column(String(50), nullable=True)
    transaction_ref = Column(String(100), nullable=True)   # gateway reference

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    booking = relationship("Booking", back_populates="transaction")

    def __repr__(self) -> str:
        return (
            f"<Transaction booking={self.booking_id} total={self.total_amount} "
            f"status={self.payment_status}>"
        )
