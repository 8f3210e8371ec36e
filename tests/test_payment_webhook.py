# tests/test_payment_webhook.py

import hashlib
import hmac
import json

import pytest

from app.core.config import settings
from app.services import payment_webhook
from tests.conftest import in_days

API = "/api/v1"
SECRET = "whsec_test"


def _sign(body: bytes, secret: str = SECRET) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


@pytest.fixture
def webhook_secret(monkeypatch):
    monkeypatch.setattr(settings, "payment_webhook_secret", SECRET)
    return SECRET


@pytest.fixture
def booking_id(client, register):
    _, admin_headers = register("admin")
    _, teacher_headers = register("teacher")
    _, student_headers = register("student")

    subject = client.post(f"{API}/subjects/", json={"name": "Biology"}, headers=admin_headers).json()
    lesson = client.post(
        f"{API}/lessons/",
        json={
            "subject_id": subject["id"],
            "title": "Cells",
            "description": "Structure of the cell",
            "price": "40",
        },
        headers=teacher_headers,
    ).json()
    booking = client.post(
        f"{API}/bookings/",
        json={"lesson_id": lesson["id"], "scheduled_at": in_days(2).isoformat()},
        headers=student_headers,
    ).json()
    return booking["id"]


class TestSignature:
    def test_valid_signature(self, webhook_secret):
        body = b'{"booking_id": "x"}'
        assert payment_webhook.verify_webhook_signature(body, _sign(body))

    def test_tampered_body(self, webhook_secret):
        body = b'{"total_amount": "100"}'
        assert not payment_webhook.verify_webhook_signature(b'{"total_amount": "1"}', _sign(body))

    def test_wrong_secret(self, webhook_secret):
        body = b"{}"
        assert not payment_webhook.verify_webhook_signature(body, _sign(body, "other"))

    def test_missing_signature(self, webhook_secret):
        assert not payment_webhook.verify_webhook_signature(b"{}", "")

    def test_unconfigured_secret_skips_check(self):
        assert settings.payment_webhook_secret == ""
        assert payment_webhook.verify_webhook_signature(b"{}", "")


class TestWebhookEndpoint:
    def test_signed_settlement_is_recorded(self, client, webhook_secret, booking_id):
        body = json.dumps(
            {
                "booking_id": booking_id,
                "total_amount": "40.00",
                "payment_method": "upi",
                "transaction_ref": "pay_ABC123",
                # Ignored: the split is always derived server-side
                "platform_commission": "0",
                "teacher_amount": "40.00",
            }
        ).encode("utf-8")

        response = client.post(
            f"{API}/transactions/webhook",
            content=body,
            headers={"Content-Type": "application/json", "X-Razorpay-Signature": _sign(body)},
        )
        assert response.status_code == 200, response.text
        txn = response.json()
        assert float(txn["platform_commission"]) == 4.0
        assert float(txn["teacher_amount"]) == 36.0
        assert txn["payment_status"] == "completed"
        assert txn["transaction_ref"] == "pay_ABC123"

    def test_bad_signature_rejected(self, client, webhook_secret, booking_id):
        body = json.dumps({"booking_id": booking_id, "total_amount": "40"}).encode("utf-8")
        response = client.post(
            f"{API}/transactions/webhook",
            content=body,
            headers={"Content-Type": "application/json", "X-Razorpay-Signature": "deadbeef"},
        )
        assert response.status_code == 400

    def test_malformed_body_rejected(self, client, webhook_secret):
        body = b'{"total_amount": "-3"}'
        response = client.post(
            f"{API}/transactions/webhook",
            content=body,
            headers={"Content-Type": "application/json", "X-Razorpay-Signature": _sign(body)},
        )
        assert response.status_code == 422
