# app/api/v1/endpoints/lessons.py
# Lesson catalogue endpoints
#
# Public:
#   GET    /lessons/                       → active lessons, filter by subject / difficulty
#   GET    /lessons/{id}                   → one lesson (inactive: owner/admin only)
#   GET    /lessons/{id}/materials         → materials of a visible lesson
#
# Teacher (owner):
#   POST   /lessons/                       → publish a lesson
#   PATCH  /lessons/{id}                   → edit / reactivate
#   POST   /lessons/{id}/deactivate        → stop offering it (soft)
#   POST   /lessons/{id}/materials         → attach material
#   DELETE /lessons/materials/{id}         → remove material

from itertools import islice
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.caller import Caller
from app.core.dependencies import get_optional_caller, require_caller
from app.db.session import get_db
from app.schemas.lesson import (
    Difficulty,
    LessonCreate,
    LessonResponse,
    LessonUpdate,
    MaterialCreate,
    MaterialResponse,
)
from app.schemas.profile import MessageResponse
from app.services import catalog_service

router = APIRouter()


@router.get(
    "/",
    response_model=List[LessonResponse],
    summary="Browse active lessons (public)",
)
def list_lessons(
    subject_id: Optional[UUID] = Query(None, description="Filter by subject"),
    difficulty: Optional[Difficulty] = Query(None, description="Filter by difficulty level"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    lessons = catalog_service.list_active_lessons(db, subject_id=subject_id, difficulty=difficulty)
    return list(islice(lessons, skip, skip + limit))


@router.post(
    "/",
    response_model=LessonResponse,
    status_code=201,
    summary="Teacher publishes a lesson",
)
def create_lesson(
    payload: LessonCreate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return catalog_service.create_lesson(
        db,
        caller,
        teacher_id=caller.id,
        subject_id=payload.subject_id,
        title=payload.title,
        description=payload.description,
        duration_minutes=payload.duration_minutes,
        price=payload.price,
        max_students=payload.max_students,
        difficulty_level=payload.difficulty_level,
    )


@router.get(
    "/{lesson_id}",
    response_model=LessonResponse,
    summary="Get a lesson",
)
def get_lesson(
    lesson_id: UUID,
    caller: Caller = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    return catalog_service.get_lesson(db, caller, lesson_id)


@router.patch(
    "/{lesson_id}",
    response_model=LessonResponse,
    summary="Owner edits a lesson",
)
def update_lesson(
    lesson_id: UUID,
    payload: LessonUpdate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return catalog_service.update_lesson(
        db, caller, lesson_id, **payload.model_dump(exclude_unset=True)
    )


@router.post(
    "/{lesson_id}/deactivate",
    response_model=LessonResponse,
    summary="Owner stops offering a lesson",
)
def deactivate_lesson(
    lesson_id: UUID,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return catalog_service.deactivate_lesson(db, caller, lesson_id)


# ── Materials ─────────────────────────────────────────────────────────────────

@router.get(
    "/{lesson_id}/materials",
    response_model=List[MaterialResponse],
    summary="List lesson materials",
)
def list_materials(
    lesson_id: UUID,
    caller: Caller = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    return catalog_service.list_materials(db, caller, lesson_id)


@router.post(
    "/{lesson_id}/materials",
    response_model=MaterialResponse,
    status_code=201,
    summary="Owner attaches a material",
)
def add_material(
    lesson_id: UUID,
    payload: MaterialCreate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return catalog_service.add_material(
        db,
        caller,
        lesson_id,
        title=payload.title,
        file_url=payload.file_url,
        file_type=payload.file_type,
    )


@router.delete(
    "/materials/{material_id}",
    response_model=MessageResponse,
    summary="Owner removes a material",
)
def delete_material(
    material_id: UUID,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    catalog_service.delete_material(db, caller, material_id)
    return MessageResponse(message="Material removed.")
