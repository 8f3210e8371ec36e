# app/core/security.py
# JWT access token verification and webhook secret checks
# Tokens are issued by the identity provider (HS256, sub = identity id).
# Used by: dependencies.py, auth endpoints, tests

import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from app.core.config import settings


# ── JWT Tokens ────────────────────────────────────────────────────────────────

def create_access_token(user_id: UUID, expires_minutes: Optional[int] = None) -> str:
    """
    Mint an access token in the identity provider's format.
    Used by tooling and the test-suite; production tokens come from the provider.

    Payload:
        sub  -- identity UUID as string
        type -- "access"
        exp  -- expiry timestamp
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    payload = {
        "sub": str(user_id),
        "type": "access",
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.
    Returns the payload dict if valid, None if expired or invalid.
    Does NOT check the database -- use dependencies.py for full validation.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError:
        return None


# ── Shared-secret webhooks ────────────────────────────────────────────────────

def verify_shared_secret(expected: str, received: Optional[str]) -> bool:
    """
    Constant-time comparison for shared-secret webhook headers.
    An empty expected secret disables the check outside production.
    """
    if not expected:
        return not settings.is_production
    if not received:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))
