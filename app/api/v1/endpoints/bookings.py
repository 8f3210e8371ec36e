# app/api/v1/endpoints/bookings.py
# Booking endpoints
#
# Student:
#   POST  /bookings/                  → reserve an active lesson (status=pending)
#
# Participants (student or teacher):
#   GET   /bookings/                  → own bookings (admin: all), optional ?status=
#   GET   /bookings/{id}              → one booking
#   PATCH /bookings/{id}/status       → pending→confirmed→completed, or →cancelled
#   PATCH /bookings/{id}              → meeting link / notes

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.caller import Caller
from app.core.dependencies import require_caller
from app.db.session import get_db
from app.schemas.booking import (
    BookingCreate,
    BookingDetailsUpdate,
    BookingResponse,
    BookingStatus,
    BookingStatusUpdate,
)
from app.services import booking_service

router = APIRouter()


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=201,
    summary="Student books a lesson",
)
def create_booking(
    payload: BookingCreate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return booking_service.create_booking(
        db,
        caller,
        lesson_id=payload.lesson_id,
        student_id=caller.id,
        scheduled_at=payload.scheduled_at,
        notes=payload.notes,
    )


@router.get(
    "/",
    response_model=List[BookingResponse],
    summary="List the caller's bookings",
)
def list_bookings(
    status: Optional[BookingStatus] = Query(None),
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return booking_service.list_bookings(db, caller, status=status)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking (participants and admins)",
)
def get_booking(
    booking_id: UUID,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return booking_service.get_booking(db, caller, booking_id)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Move a booking through its lifecycle",
)
def update_booking_status(
    booking_id: UUID,
    payload: BookingStatusUpdate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    """Illegal transitions (e.g. completed → pending) are answered with 409."""
    return booking_service.update_status(db, caller, booking_id, payload.status)


@router.patch(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Set meeting link / notes",
)
def update_booking_details(
    booking_id: UUID,
    payload: BookingDetailsUpdate,
    caller: Caller = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return booking_service.update_booking_details(
        db,
        caller,
        booking_id,
        meeting_link=payload.meeting_link,
        notes=payload.notes,
    )
