# app/api/v1/endpoints/profiles.py
# Profile endpoints
#
#   GET   /profiles/teachers        → teacher directory, best rated first (public)
#   GET   /profiles/{id}            → any profile (public -- open visibility)
#   PATCH /profiles/{id}            → self or admin
#   GET   /profiles/{id}/lessons    → a teacher's lessons (inactive ones for owner/admin only)
#   GET   /profiles/{id}/reviews    → reviews received by a teacher (public)

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.caller import Caller
from app.core.dependencies import get_optional_caller, require_caller
from app.db.session import get_db
from app.schemas.lesson import LessonResponse
from app.schemas.profile import ProfileResponse, ProfileUpdate
from app.schemas.review import ReviewResponse
from app.services import catalog_service, profile_service, review_service

router = APIRouter()


@router.get(
    "/teachers",
    response_model=List[ProfileResponse],
    summary="List teachers (public)",
)
def list_teachers(
    verified_only: bool = Query(False, description="Only verified teachers"),
    db: Session = Depends(get_db),
):
    return profile_service.list_teachers(db, verified_only=verified_only)


@router.get(
    "/{profile_id}",
    response_model=ProfileResponse,
    summary="Get a profile (public)",
)
def get_profile(
    profile_id: UUID,
    caller: Caller = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    return profile_service.get_profile(db, caller, profile_id)


@router.patch(
    "/{profile_id}",
    response_model=ProfileResponse,
    summary="Update a profile (self or admin)",
)
def update_profile(
    profile_id: UUID,
    payload: ProfileUpdate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    """
    Any user can edit their own contact and teaching details.
    Role and verification flag can only be changed by an admin.
    Rating and totals are derived and cannot be edited at all.
    """
    return profile_service.update_profile(db, caller, profile_id, payload)


@router.get(
    "/{profile_id}/lessons",
    response_model=List[LessonResponse],
    summary="List a teacher's lessons",
)
def list_teacher_lessons(
    profile_id: UUID,
    caller: Caller = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    return catalog_service.list_teacher_lessons(db, caller, profile_id)


@router.get(
    "/{profile_id}/reviews",
    response_model=List[ReviewResponse],
    summary="List reviews received by a teacher (public)",
)
def list_teacher_reviews(
    profile_id: UUID,
    db: Session = Depends(get_db),
):
    return review_service.list_teacher_reviews(db, profile_id)
