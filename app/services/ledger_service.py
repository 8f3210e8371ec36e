# app/services/ledger_service.py
# Transaction ledger -- one settlement record per booking
#
# platform_commission and teacher_amount are derived inside the same flush
# as every write to total_amount:
#   platform_commission = round(total_amount * COMMISSION_RATE, 2)   (half-up)
#   teacher_amount      = total_amount - platform_commission
# so the two parts always add back up to the total exactly.

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core import policy
from app.core.caller import Caller
from app.core.config import settings
from app.core.exceptions import ConflictError, NotFound, ValidationError
from app.models.booking import Booking
from app.models.transaction import MAX_AMOUNT, PAYMENT_STATUSES, Transaction

logger = logging.getLogger("tutorhub.ledger")

CENT = Decimal("0.01")


def split_amount(
    total_amount, commission_rate: Optional[Decimal] = None
) -> Tuple[Decimal, Decimal]:
    """Return (platform_commission, teacher_amount) for a total."""
    rate = settings.commission_rate if commission_rate is None else Decimal(str(commission_rate))
    total = Decimal(str(total_amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    if total < 0:
        raise ValidationError("total_amount cannot be negative.")
    if total > MAX_AMOUNT:
        raise ValidationError(
            f"total_amount cannot exceed {MAX_AMOUNT}.", details={"total_amount": str(total)}
        )

    commission = (total * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    return commission, total - commission


def _apply_amounts(transaction: Transaction, total_amount) -> None:
    commission, teacher_amount = split_amount(total_amount)
    transaction.total_amount = Decimal(str(total_amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    transaction.platform_commission = commission
    transaction.teacher_amount = teacher_amount


def _validate_status(payment_status: str) -> None:
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError(
            f"Invalid payment status '{payment_status}'.",
            details={"allowed": list(PAYMENT_STATUSES)},
        )


def record_payment(
    db: Session,
    caller: Caller,
    booking_id: UUID,
    total_amount,
    payment_method: Optional[str] = None,
    transaction_ref: Optional[str] = None,
    payment_status: str = "completed",
) -> Transaction:
    """
    Create the booking's transaction, or update it when one already exists.
    Writable by the payment collaborator (system caller) or an admin only.
    """
    policy.authorize(
        policy.can_write_transaction(caller),
        "Transactions are recorded by the payment system only.",
    )
    _validate_status(payment_status)

    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFound("Booking not found.")

    transaction = (
        db.query(Transaction)
        .filter(Transaction.booking_id == booking.id)
        .with_for_update()
        .first()
    )
    created = transaction is None
    if created:
        transaction = Transaction(
            booking_id=booking.id,
            student_id=booking.student_id,
            teacher_id=booking.teacher_id,
        )
        db.add(transaction)

    _apply_amounts(transaction, total_amount)
    transaction.payment_status = payment_status
    if payment_method is not None:
        transaction.payment_method = payment_method
    if transaction_ref is not None:
        transaction.transaction_ref = transaction_ref

    try:
        db.flush()
    except IntegrityError as exc:
        raise ConflictError(
            "A transaction for this booking was recorded concurrently.",
            details={"booking_id": str(booking_id)},
        ) from exc

    logger.info(
        "Payment %s booking=%s total=%s commission=%s status=%s",
        "recorded" if created else "updated",
        booking.id,
        transaction.total_amount,
        transaction.platform_commission,
        transaction.payment_status,
    )
    return transaction


def update_payment_status(
    db: Session, caller: Caller, transaction_id: UUID, payment_status: str
) -> Transaction:
    """Status-only change (failed, refunded...). The split is re-derived all the same."""
    policy.authorize(
        policy.can_write_transaction(caller),
        "Transactions are updated by the payment system only.",
    )
    _validate_status(payment_status)

    transaction = (
        db.query(Transaction)
        .filter(Transaction.id == transaction_id)
        .with_for_update()
        .first()
    )
    if not transaction:
        raise NotFound("Transaction not found.")

    transaction.payment_status = payment_status
    _apply_amounts(transaction, transaction.total_amount)
    db.flush()

    logger.info("Transaction %s status -> %s", transaction.id, payment_status)
    return transaction


def get_transaction(db: Session, caller: Caller, transaction_id: UUID) -> Transaction:
    transaction = db.get(Transaction, transaction_id)
    if not transaction:
        raise NotFound("Transaction not found.")
    policy.authorize(
        policy.can_read_transaction(caller, transaction),
        "You are not a party to this transaction.",
    )
    return transaction


def list_transactions(db: Session, caller: Caller) -> List[Transaction]:
    query = db.query(Transaction)
    if not caller.is_admin:
        policy.authorize(caller.is_authenticated, "Authentication required.")
        query = query.filter(
            (Transaction.student_id == caller.id) | (Transaction.teacher_id == caller.id)
        )
    return query.order_by(Transaction.created_at.desc()).all()
