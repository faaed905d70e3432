# backend/agenda/services/ledger.py
"""Booking ledger: which appointments occupy the provider's calendar."""

from datetime import datetime

from sqlalchemy.orm import Session

from ..models.generated import Appointments as DBAppointment
from .slots.config import BLOCKING_STATUSES
from .slots.intervals import from_db, to_db


def get_blocking_appointments(
    db: Session,
    provider_id: int,
    window_start: datetime,
    window_end: datetime,
    exclude_id: int | None = None,
) -> list[DBAppointment]:
    """Scheduled/rescheduled appointments overlapping [window_start, window_end)."""
    query = db.query(DBAppointment).filter(
        DBAppointment.provider_id == provider_id,
        DBAppointment.status.in_(BLOCKING_STATUSES),
        DBAppointment.start_at < to_db(window_end),
        DBAppointment.end_at > to_db(window_start),
    )
    if exclude_id is not None:
        query = query.filter(DBAppointment.id != exclude_id)
    return query.order_by(DBAppointment.start_at).all()


def appointment_intervals(appointments: list[DBAppointment]) -> list[tuple[datetime, datetime]]:
    return [(from_db(a.start_at), from_db(a.end_at)) for a in appointments]


def list_appointments(
    db: Session,
    provider_id: int | None = None,
    client_id: int | None = None,
    window_start: datetime | None = None,
    window_end: datetime | None = None,
    statuses: list[str] | None = None,
) -> list[DBAppointment]:
    query = db.query(DBAppointment)
    if provider_id is not None:
        query = query.filter(DBAppointment.provider_id == provider_id)
    if client_id is not None:
        query = query.filter(DBAppointment.client_id == client_id)
    if window_start is not None:
        query = query.filter(DBAppointment.end_at > to_db(window_start))
    if window_end is not None:
        query = query.filter(DBAppointment.start_at < to_db(window_end))
    if statuses:
        query = query.filter(DBAppointment.status.in_(statuses))
    return query.order_by(DBAppointment.start_at).all()
