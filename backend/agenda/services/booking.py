# backend/agenda/services/booking.py
"""
Atomic booking transaction and the other calendar mutations.

book_with_credit, per provider and one at a time:
  1. start >= now + min_schedule_lead_hours     else LeadTimeViolation
  2. length == provider session duration        else InvalidArgument
     a candidate of an active rule, no block    else SlotTaken
  3. no scheduled/rescheduled overlap           else SlotTaken
  4. one credit available (consumed here)       else NoCredits
  5. insert appointment, commit                 (credit + row, or nothing)

The checks run inside the lock and the DB transaction, never trusting the
slot list the client picked from. Errors go back to the caller verbatim;
nothing here retries or picks another slot.

TransactionTimeout means the outcome is unknown to the caller: re-read the
ledger before retrying.
"""

import logging
import time
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ..auth import Identity
from ..errors import (
    CancelWindowClosed,
    Forbidden,
    InvalidArgument,
    LeadTimeViolation,
    NoCredits,
    NotAuthenticated,
    NotFound,
    SlotTaken,
    TransactionTimeout,
)
from ..models.generated import (
    Appointments as DBAppointment,
    ProviderSettings as DBSettings,
)
from .availability_blocks import get_blocks
from .availability_rules import list_rules
from .credits import consume_credit
from .events import emit_event
from .ledger import get_blocking_appointments
from .locks import get_provider_locks
from .provider_settings import check_session_type, session_duration
from .slots.config import BLOCKING_STATUSES, BookingConfig, get_booking_config
from .slots.generator import earliest_bookable_start, is_candidate
from .slots.intervals import UTC, ensure_utc, from_db, parse_timestamp, to_db

logger = logging.getLogger(__name__)

STATUS_SCHEDULED = "scheduled"
STATUS_RESCHEDULED = "rescheduled"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"


def book_with_credit(
    db: Session,
    client_id: int | None,
    provider_id: int,
    session_type: str,
    start: datetime | str,
    end: datetime | str,
    now: datetime | None = None,
    config: BookingConfig | None = None,
    locks=None,
) -> DBAppointment:
    """
    Book [start, end) with the provider, paying one session credit.

    Args:
        client_id: Authenticated client; None raises NotAuthenticated
        now: Reference time (defaults to the clock, read inside the lock)

    Returns:
        The committed appointment (status "scheduled").
    """
    if client_id is None:
        raise NotAuthenticated()
    check_session_type(session_type)
    start, end = _parse_range(start, end)

    config = config or get_booking_config()
    locks = locks or get_provider_locks()
    deadline = time.monotonic() + config.booking_timeout_seconds

    with locks.hold(provider_id, config.booking_timeout_seconds):
        try:
            settings_row = _lock_provider_row(db, provider_id)
            current = ensure_utc(now) if now else datetime.now(UTC)

            if start < earliest_bookable_start(current, config):
                raise LeadTimeViolation(
                    f"Sessions must be booked at least {config.min_schedule_lead_hours}h ahead"
                )

            _check_availability(db, settings_row, session_type, start, end, config)

            if get_blocking_appointments(db, provider_id, start, end):
                raise SlotTaken()

            if not consume_credit(db, client_id, provider_id, session_type):
                raise NoCredits()

            appointment = DBAppointment(
                client_id=client_id,
                provider_id=provider_id,
                session_type=session_type,
                status=STATUS_SCHEDULED,
                start_at=to_db(start),
                end_at=to_db(end),
                created_at=to_db(current),
                updated_at=to_db(current),
            )
            db.add(appointment)
            db.flush()

            _check_deadline(deadline, provider_id)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.info(
                f"Booking rejected: provider={provider_id} client={client_id} "
                f"{start.isoformat()} → {type(e).__name__}"
            )
            raise

    db.refresh(appointment)
    logger.info(
        f"Appointment booked: id={appointment.id} provider={provider_id} "
        f"client={client_id} type={session_type} start={start.isoformat()}"
    )
    emit_event("appointment_booked", {
        "appointment_id": appointment.id,
        "client_id": client_id,
        "provider_id": provider_id,
        "start_at": start.isoformat(),
    })
    return appointment


def reschedule_appointment(
    db: Session,
    appointment_id: int,
    identity: Identity,
    new_start: datetime | str,
    new_end: datetime | str,
    now: datetime | None = None,
    config: BookingConfig | None = None,
    locks=None,
) -> DBAppointment:
    """
    Move an appointment to [new_start, new_end). Credits are not touched.

    Same discipline as booking: provider lock, re-validate lead time,
    availability and overlap (ignoring the appointment being moved), then
    commit.
    """
    new_start, new_end = _parse_range(new_start, new_end)
    config = config or get_booking_config()
    locks = locks or get_provider_locks()
    deadline = time.monotonic() + config.booking_timeout_seconds

    provider_id = get_appointment(db, appointment_id).provider_id

    with locks.hold(provider_id, config.booking_timeout_seconds):
        try:
            settings_row = _lock_provider_row(db, provider_id)
            appointment = db.get(DBAppointment, appointment_id, populate_existing=True)
            current = ensure_utc(now) if now else datetime.now(UTC)

            _check_actor(appointment, identity)
            if appointment.status not in BLOCKING_STATUSES:
                raise InvalidArgument(f"Appointment is {appointment.status}, cannot be moved")
            if not identity.is_provider:
                _check_cancel_window(appointment, settings_row, current)

            if new_start < earliest_bookable_start(current, config):
                raise LeadTimeViolation(
                    f"Sessions must be booked at least {config.min_schedule_lead_hours}h ahead"
                )

            _check_availability(
                db, settings_row, appointment.session_type, new_start, new_end, config
            )

            if get_blocking_appointments(
                db, provider_id, new_start, new_end, exclude_id=appointment_id
            ):
                raise SlotTaken()

            old_start = from_db(appointment.start_at)
            appointment.start_at = to_db(new_start)
            appointment.end_at = to_db(new_end)
            appointment.status = STATUS_RESCHEDULED
            appointment.updated_at = to_db(current)
            db.flush()

            _check_deadline(deadline, provider_id)
            db.commit()
        except Exception:
            db.rollback()
            raise

    db.refresh(appointment)
    logger.info(
        f"Appointment {appointment_id} rescheduled by {identity.role} {identity.user_id}: "
        f"{old_start.isoformat()} → {new_start.isoformat()}"
    )
    emit_event("appointment_rescheduled", {
        "appointment_id": appointment_id,
        "provider_id": provider_id,
        "client_id": appointment.client_id,
        "old_start_at": old_start.isoformat(),
        "start_at": new_start.isoformat(),
    })
    return appointment


def update_appointment_status(
    db: Session,
    appointment_id: int,
    identity: Identity,
    status: str,
    reason: str | None = None,
    now: datetime | None = None,
) -> DBAppointment:
    """
    Complete or cancel an appointment.

    Provider: completed | cancelled on own calendar.
    Client: cancelled only, and only while start - now >= min_cancel_hours.
    Credits are not refunded here.
    """
    if status not in (STATUS_COMPLETED, STATUS_CANCELLED):
        raise InvalidArgument(f"Unsupported status: {status!r}")

    appointment = get_appointment(db, appointment_id)
    _check_actor(appointment, identity)
    current = ensure_utc(now) if now else datetime.now(UTC)

    if appointment.status not in BLOCKING_STATUSES:
        raise InvalidArgument(f"Appointment is already {appointment.status}")

    if not identity.is_provider:
        if status != STATUS_CANCELLED:
            raise Forbidden("Clients can only cancel")
        settings_row = db.get(DBSettings, appointment.provider_id)
        _check_cancel_window(appointment, settings_row, current)

    appointment.status = status
    appointment.updated_at = to_db(current)
    if status == STATUS_CANCELLED:
        appointment.cancel_reason = reason
    db.commit()
    db.refresh(appointment)

    logger.info(
        f"Appointment {appointment_id} → {status} by {identity.role} {identity.user_id}"
    )
    emit_event("appointment_status_changed", {
        "appointment_id": appointment_id,
        "status": status,
        "provider_id": appointment.provider_id,
        "client_id": appointment.client_id,
    })
    return appointment


def get_appointment(db: Session, appointment_id: int) -> DBAppointment:
    obj = db.get(DBAppointment, appointment_id)
    if not obj:
        raise NotFound(f"Appointment {appointment_id} not found")
    return obj


# ── Helpers ──────────────────────────────────────────────────────────────


def _parse_range(start, end) -> tuple[datetime, datetime]:
    start = parse_timestamp(start)
    end = parse_timestamp(end)
    if end <= start:
        raise InvalidArgument("end must be after start")
    return start, end


def _lock_provider_row(db: Session, provider_id: int) -> DBSettings:
    """
    Row-lock the provider's settings (SELECT ... FOR UPDATE).

    Serialises bookings across processes on databases that support row
    locks; sqlite ignores FOR UPDATE and relies on the provider lock.
    """
    row = (
        db.query(DBSettings)
        .filter(DBSettings.provider_id == provider_id)
        .with_for_update()
        .first()
    )
    if not row:
        raise NotFound(f"Provider {provider_id} not found")
    return row


def _check_actor(appointment: DBAppointment, identity: Identity) -> None:
    if identity.is_provider:
        if appointment.provider_id != identity.user_id:
            raise Forbidden("Not your calendar")
    elif appointment.client_id != identity.user_id:
        raise Forbidden("Not your appointment")


def _check_cancel_window(
    appointment: DBAppointment,
    settings_row: DBSettings,
    now: datetime,
) -> None:
    hours = settings_row.min_cancel_hours if settings_row else 0
    if from_db(appointment.start_at) - now < timedelta(hours=hours):
        raise CancelWindowClosed(
            f"Appointments can only be changed up to {hours}h before the session"
        )


def _check_deadline(deadline: float, provider_id: int) -> None:
    if time.monotonic() > deadline:
        logger.warning(f"Booking transaction for provider {provider_id} exceeded its deadline")
        raise TransactionTimeout()


def _check_availability(
    db: Session,
    settings_row: DBSettings,
    session_type: str,
    start: datetime,
    end: datetime,
    config: BookingConfig,
) -> None:
    """Reject intervals the slot generator would never have offered."""
    duration_min = session_duration(settings_row, session_type)
    if end - start != timedelta(minutes=duration_min):
        raise InvalidArgument(f"{session_type} sessions last {duration_min} minutes")

    rules = list_rules(db, settings_row.provider_id, active_only=True)
    if not is_candidate(start, end, session_type, rules, settings_row.timezone, config):
        raise SlotTaken("Requested time is not an open slot")

    if get_blocks(db, settings_row.provider_id, start, end):
        raise SlotTaken("Requested time is blocked by the provider")
