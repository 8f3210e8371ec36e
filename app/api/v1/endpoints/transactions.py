# app/api/v1/endpoints/transactions.py
# Transaction ledger endpoints
#
#   POST  /transactions/webhook         → settlement report from the payment gateway (signed)
#   POST  /transactions/                → admin records a payment manually
#   PATCH /transactions/{id}/status     → admin marks failed / refunded ...
#   GET   /transactions/                → caller's transactions (admin: all)
#   GET   /transactions/{id}            → one transaction (participants and admins)

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.caller import Caller
from app.core.dependencies import require_caller
from app.core.exceptions import HTTP_422_UNPROCESSABLE
from app.db.session import get_db
from app.schemas.transaction import PaymentRecord, PaymentStatusUpdate, TransactionResponse
from app.services import ledger_service, payment_webhook

logger = logging.getLogger("tutorhub.payments")

router = APIRouter()


@router.post(
    "/webhook",
    response_model=TransactionResponse,
    summary="Payment gateway settlement webhook",
    include_in_schema=False,
)
async def payment_settled(
    request: Request,
    x_razorpay_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """
    The signature is checked against the raw body before anything is parsed.
    Commission fields in the body, if any, are ignored.
    """
    body = await request.body()
    if not payment_webhook.verify_webhook_signature(body, x_razorpay_signature or ""):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook signature.",
        )

    try:
        record = PaymentRecord.model_validate_json(body)
    except PydanticValidationError as exc:
        logger.warning("Rejected payment webhook: malformed body")
        raise HTTPException(
            status_code=HTTP_422_UNPROCESSABLE,
            detail=exc.errors(include_url=False, include_context=False),
        )

    return await run_in_threadpool(payment_webhook.handle_settlement, db, record)


@router.post(
    "/",
    response_model=TransactionResponse,
    status_code=201,
    summary="Record a payment (admin)",
)
def record_payment(
    payload: PaymentRecord,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return ledger_service.record_payment(
        db,
        caller,
        booking_id=payload.booking_id,
        total_amount=payload.total_amount,
        payment_method=payload.payment_method,
        transaction_ref=payload.transaction_ref,
        payment_status=payload.payment_status,
    )


@router.patch(
    "/{transaction_id}/status",
    response_model=TransactionResponse,
    summary="Change a payment status (admin)",
)
def update_payment_status(
    transaction_id: UUID,
    payload: PaymentStatusUpdate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return ledger_service.update_payment_status(db, caller, transaction_id, payload.payment_status)


@router.get(
    "/",
    response_model=List[TransactionResponse],
    summary="List the caller's transactions",
)
def list_transactions(
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return ledger_service.list_transactions(db, caller)


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get a transaction (participants and admins)",
)
def get_transaction(
    transaction_id: UUID,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return ledger_service.get_transaction(db, caller, transaction_id)
