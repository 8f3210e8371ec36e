# app/core/dependencies.py
# FastAPI dependency functions that turn a bearer token into a Caller
#
# Key rules:
#   1. The caller's role is ALWAYS read live from the profiles table, never
#      from the token -- an admin demotion takes effect immediately
#   2. Public GET endpoints use get_optional_caller() -- anonymous is allowed
#   3. Every other endpoint uses require_caller() -- 401 without a valid token

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.caller import Caller
from app.core.security import decode_token
from app.db.session import get_db
from app.models.profile import Profile

# Bearer token extractor -- auto_error=False so we can handle 401 ourselves
bearer_scheme = HTTPBearer(auto_error=False)


def _caller_from_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: Session,
) -> Optional[Caller]:
    """
    Decode Bearer token and load the caller's profile.
    Returns None if no token, invalid token, or no profile for the identity.
    """
    if not credentials:
        return None

    payload = decode_token(credentials.credentials)
    if not payload:
        return None

    if payload.get("type", "access") != "access":
        return None

    subject = payload.get("sub")
    if not subject:
        return None

    try:
        profile_id = UUID(str(subject))
    except ValueError:
        return None

    profile = db.get(Profile, profile_id)
    if not profile:
        return None

    return Caller(id=profile.id, role=profile.user_type)


def get_optional_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Caller:
    """
    Returns the authenticated caller if a valid token is present,
    Caller.anonymous() otherwise -- does NOT raise 401.

    Use for: public catalogue / profile / review reads
    """
    return _caller_from_token(credentials, db) or Caller.anonymous()


def require_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Caller:
    """
    Requires a valid JWT token for an identity that has a profile.
    Raises 401 if not authenticated.
    """
    caller = _caller_from_token(credentials, db)
    if not caller:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Please log in.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller
