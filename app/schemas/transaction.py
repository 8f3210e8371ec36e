# app/schemas/transaction.py
# Pydantic request/response models for the transaction ledger
#
# Request bodies deliberately have no platform_commission / teacher_amount:
# both are derived server-side from total_amount.

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.transaction import MAX_AMOUNT

PaymentStatus = Literal["pending", "completed", "failed", "refunded"]


class PaymentRecord(BaseModel):
    """Settlement reported by the payment collaborator (or entered by an admin)."""
    booking_id: UUID
    total_amount: Decimal = Field(..., ge=0, le=MAX_AMOUNT)
    payment_status: PaymentStatus = "completed"
    payment_method: Optional[str] = Field(None, max_length=50)
    transaction_ref: Optional[str] = Field(None, max_length=100)


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus


class TransactionResponse(BaseModel):
    id: UUID
    booking_id: UUID
    student_id: UUID
    teacher_id: UUID
    total_amount: Decimal
    platform_commission: Decimal
    teacher_amount: Decimal
    payment_status: str
    payment_method: Optional[str] = None
    transaction_ref: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
