# app/api/v1/endpoints/subjects.py
# Subject catalogue -- public reads, admin writes

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.caller import Caller
from app.core.dependencies import require_caller
from app.db.session import get_db
from app.schemas.lesson import SubjectCreate, SubjectResponse, SubjectUpdate
from app.services import catalog_service

router = APIRouter()


@router.get("/", response_model=List[SubjectResponse], summary="List subjects (public)")
def list_subjects(db: Session = Depends(get_db)):
    return catalog_service.list_subjects(db)


@router.post("/", response_model=SubjectResponse, status_code=201, summary="Create a subject (admin)")
def create_subject(
    payload: SubjectCreate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return catalog_service.create_subject(
        db,
        caller,
        name=payload.name,
        description=payload.description,
        icon_name=payload.icon_name,
    )


@router.patch("/{subject_id}", response_model=SubjectResponse, summary="Update a subject (admin)")
def update_subject(
    subject_id: UUID,
    payload: SubjectUpdate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return catalog_service.update_subject(
        db, caller, subject_id, **payload.model_dump(exclude_unset=True)
    )
