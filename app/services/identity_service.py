# app/services/identity_service.py
# Identity bootstrap -- turns the provider's new-identity event into a Profile
#
# Exactly once per identity: a second event for the same id (or email) is a
# ConflictError, never a silent no-op. The caller treats it as a failed
# registration.

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, ValidationError
from app.models.profile import USER_TYPES, Profile
from app.schemas.profile import IdentityEvent

logger = logging.getLogger("tutorhub.identity")

DEFAULT_FULL_NAME = "New User"
DEFAULT_USER_TYPE = "student"
MAX_FULL_NAME_LENGTH = 100


def bootstrap_profile(db: Session, event: IdentityEvent) -> Profile:
    full_name = (event.metadata.full_name or "").strip() or DEFAULT_FULL_NAME
    if len(full_name) > MAX_FULL_NAME_LENGTH:
        raise ValidationError(
            f"Full name must be {MAX_FULL_NAME_LENGTH} characters or fewer.",
            details={"length": len(full_name)},
        )
    user_type = event.metadata.user_type or DEFAULT_USER_TYPE
    if user_type not in USER_TYPES:
        raise ValidationError(
            f"Unknown user type '{user_type}'.",
            details={"allowed": list(USER_TYPES)},
        )

    existing = db.query(Profile).filter(
        or_(Profile.id == event.id, Profile.email == event.email)
    ).first()
    if existing:
        raise ConflictError(
            "A profile already exists for this identity.",
            details={"id": str(event.id)},
        )

    profile = Profile(
        id=event.id,
        email=event.email,
        full_name=full_name,
        user_type=user_type,
    )
    db.add(profile)
    try:
        db.flush()
    except IntegrityError as exc:
        raise ConflictError(
            "A profile already exists for this identity.",
            details={"id": str(event.id)},
        ) from exc

    logger.info("Profile bootstrapped id=%s user_type=%s", profile.id, profile.user_type)
    return profile
