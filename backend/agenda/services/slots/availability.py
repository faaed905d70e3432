# backend/agenda/services/slots/availability.py
"""
Slot availability for a provider.

Reads rules, blocks, booked appointments and settings fresh on every call
(no cache) and hands them to the pure generator. Safe to run in parallel.
"""

from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from ..availability_blocks import block_intervals, get_blocks
from ..availability_rules import list_rules
from ..ledger import appointment_intervals, get_blocking_appointments
from ..provider_settings import check_session_type, get_settings, session_duration
from .config import BookingConfig, get_booking_config
from .generator import (
    Slot,
    SlotWithStatus,
    generate_slots_for_day,
    generate_slots_with_status,
)
from .intervals import UTC, day_bounds, ensure_utc, get_timezone


def get_slots(
    db: Session,
    provider_id: int,
    target_date: date,
    session_type: str,
    now: datetime | None = None,
    config: BookingConfig | None = None,
) -> list[Slot]:
    """Bookable slots for one day (GetSlots)."""
    return _day_slots(db, provider_id, target_date, session_type, now, config, with_status=False)


def get_slots_with_status(
    db: Session,
    provider_id: int,
    target_date: date,
    session_type: str,
    now: datetime | None = None,
    config: BookingConfig | None = None,
) -> list[SlotWithStatus]:
    """All candidate slots of the day labelled available/booked/past/blocked."""
    return _day_slots(db, provider_id, target_date, session_type, now, config, with_status=True)


def get_slots_calendar(
    db: Session,
    provider_id: int,
    session_type: str,
    start_date: date,
    end_date: date,
    now: datetime | None = None,
    config: BookingConfig | None = None,
) -> list[tuple[date, int]]:
    """
    Open slot count per day in [start_date, end_date].

    Blocks and appointments are read once for the whole range.

    Returns:
        List of (date, open_slots_count) pairs.
    """
    config = config or get_booking_config()
    now = ensure_utc(now or datetime.now(UTC))
    check_session_type(session_type)

    provider = get_settings(db, provider_id)
    duration = session_duration(provider, session_type)
    rules = list_rules(db, provider_id, active_only=True)

    range_start, _ = day_bounds(start_date, provider.timezone)
    _, range_end = day_bounds(end_date, provider.timezone)
    blocks = block_intervals(get_blocks(db, provider_id, range_start, range_end))
    booked = appointment_intervals(
        get_blocking_appointments(db, provider_id, range_start, range_end)
    )

    days = []
    current = start_date
    while current <= end_date:
        slots = generate_slots_for_day(
            day=current,
            session_type=session_type,
            rules=rules,
            duration_min=duration,
            tz_name=provider.timezone,
            blocks=blocks,
            booked=booked,
            now=now,
            config=config,
        )
        days.append((current, len(slots)))
        current += timedelta(days=1)

    return days


def provider_today(db: Session, provider_id: int, now: datetime | None = None) -> date:
    """Current calendar date in the provider's timezone."""
    provider = get_settings(db, provider_id)
    now = ensure_utc(now or datetime.now(UTC))
    return now.astimezone(get_timezone(provider.timezone)).date()


# ── Internals ────────────────────────────────────────────────────────────


def _day_slots(
    db: Session,
    provider_id: int,
    target_date: date,
    session_type: str,
    now: datetime | None,
    config: BookingConfig | None,
    with_status: bool,
):
    config = config or get_booking_config()
    now = ensure_utc(now or datetime.now(UTC))
    check_session_type(session_type)

    provider = get_settings(db, provider_id)
    rules = list_rules(db, provider_id, active_only=True)
    if not rules:
        return []

    day_start, day_end = day_bounds(target_date, provider.timezone)
    blocks = block_intervals(get_blocks(db, provider_id, day_start, day_end))
    booked = appointment_intervals(
        get_blocking_appointments(db, provider_id, day_start, day_end)
    )

    generate = generate_slots_with_status if with_status else generate_slots_for_day
    return generate(
        day=target_date,
        session_type=session_type,
        rules=rules,
        duration_min=session_duration(provider, session_type),
        tz_name=provider.timezone,
        blocks=blocks,
        booked=booked,
        now=now,
        config=config,
    )
