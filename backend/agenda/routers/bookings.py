# backend/agenda/routers/bookings.py
"""
Booking API.

POST /bookings is the only way to create an appointment (BookWithCredit).
Error bodies carry a `code` the client branches on:
  SLOT_TAKEN          → refresh booked appointments, user re-picks a slot
  NO_CREDITS          → route to credit purchase
  LEAD_TIME_VIOLATION → slot too close to now
  TRANSACTION_TIMEOUT → outcome unknown, re-read appointments first
"""

from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import Identity, get_identity
from ..database import get_db
from ..errors import Forbidden
from ..schemas.bookings import (
    AppointmentRead,
    BookingCreate,
    BookingCreated,
    BookingReschedule,
    BookingStatusUpdate,
)
from ..services.booking import (
    book_with_credit,
    get_appointment,
    reschedule_appointment,
    update_appointment_status,
)
from ..services.ledger import list_appointments
from ..services.provider_settings import get_settings
from ..services.slots.intervals import day_bounds

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    if identity.is_provider:
        raise Forbidden("Only clients book sessions")

    appointment = book_with_credit(
        db,
        client_id=identity.user_id,
        provider_id=data.provider_id,
        session_type=data.session_type,
        start=data.start,
        end=data.end,
    )
    return BookingCreated(appointment_id=appointment.id, status=appointment.status)


@router.get("/", response_model=list[AppointmentRead])
def list_bookings(
    date_from: date | None = None,
    date_to: date | None = None,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Provider: own calendar. Client: own sessions."""
    window_start = window_end = None
    if identity.is_provider:
        provider = get_settings(db, identity.user_id)
        if date_from:
            window_start, _ = day_bounds(date_from, provider.timezone)
        if date_to:
            _, window_end = day_bounds(date_to, provider.timezone)
        return list_appointments(
            db,
            provider_id=identity.user_id,
            window_start=window_start,
            window_end=window_end,
        )

    if date_from:
        window_start = datetime.combine(date_from, time.min)
    if date_to:
        window_end = datetime.combine(date_to + timedelta(days=1), time.min)
    return list_appointments(
        db,
        client_id=identity.user_id,
        window_start=window_start,
        window_end=window_end,
    )


@router.get("/{id}", response_model=AppointmentRead)
def get_booking(
    id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    obj = get_appointment(db, id)
    owner = obj.provider_id if identity.is_provider else obj.client_id
    if owner != identity.user_id:
        raise Forbidden("Not your appointment")
    return obj


@router.post("/{id}/reschedule", response_model=AppointmentRead)
def reschedule_booking(
    id: int,
    data: BookingReschedule,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return reschedule_appointment(db, id, identity, data.start, data.end)


@router.post("/{id}/status", response_model=AppointmentRead)
def update_booking_status(
    id: int,
    data: BookingStatusUpdate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    return update_appointment_status(db, id, identity, data.status, data.reason)
