# app/services/payment_webhook.py
# Inbound settlement reports from the payment collaborator
#
# Flow:
#   1. Gateway settles (or fails / refunds) a booking payment
#   2. Gateway POSTs the outcome to /api/v1/transactions/webhook,
#      signed with HMAC-SHA256 in the X-Razorpay-Signature header
#   3. We verify the signature, then record it as the system caller
#
# We never call the gateway ourselves -- only the razorpay SDK's signature
# utility is used.

import logging

import razorpay
from razorpay.errors import SignatureVerificationError
from sqlalchemy.orm import Session

from app.core.caller import Caller
from app.core.config import settings
from app.models.transaction import Transaction
from app.schemas.transaction import PaymentRecord
from app.services import ledger_service

logger = logging.getLogger("tutorhub.payments")


def verify_webhook_signature(payload_body: bytes, signature: str) -> bool:
    """
    Verify the gateway's webhook signature.
    Must be called before processing any webhook event.

    Args:
        payload_body: Raw request body bytes
        signature: Value of the X-Razorpay-Signature header

    Returns:
        True if signature is valid, False otherwise
    """
    if not settings.payment_webhook_secret:
        # In development without webhook secret, skip verification
        return not settings.is_production
    if not signature:
        return False

    client = razorpay.Client(auth=("", ""))
    try:
        client.utility.verify_webhook_signature(
            payload_body.decode("utf-8"),
            signature,
            settings.payment_webhook_secret,
        )
    except (SignatureVerificationError, UnicodeDecodeError):
        logger.warning("Rejected payment webhook: bad signature")
        return False
    return True


def handle_settlement(db: Session, record: PaymentRecord) -> Transaction:
    """Persist a verified settlement report."""
    return ledger_service.record_payment(
        db,
        Caller.system(),
        booking_id=record.booking_id,
        total_amount=record.total_amount,
        payment_method=record.payment_method,
        transaction_ref=record.transaction_ref,
        payment_status=record.payment_status,
    )
