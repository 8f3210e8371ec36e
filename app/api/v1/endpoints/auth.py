# app/api/v1/endpoints/auth.py
# Identity provider integration
#
#   POST /auth/identity-events  → bootstrap a profile for a newly registered identity
#   GET  /auth/me               → the caller's own profile
#
# Login, signup and token issuance live in the identity provider.

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core.caller import Caller
from app.core.config import settings
from app.core.dependencies import require_caller
from app.core.security import verify_shared_secret
from app.db.session import get_db
from app.schemas.profile import IdentityEvent, ProfileResponse
from app.services import identity_service, profile_service

router = APIRouter()


@router.post(
    "/identity-events",
    response_model=ProfileResponse,
    status_code=201,
    summary="New identity registered (called by the identity provider)",
)
def identity_created(
    event: IdentityEvent,
    x_auth_webhook_secret: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """
    Creates the identity's profile. A duplicate event is answered with 409 --
    the provider must treat that as a failed registration.
    """
    if not verify_shared_secret(settings.auth_webhook_secret, x_auth_webhook_secret):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook secret.",
        )
    return identity_service.bootstrap_profile(db, event)


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get the caller's own profile",
)
def get_me(
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return profile_service.get_profile(db, caller, caller.id)
