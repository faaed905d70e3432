# backend/agenda/services/slots/generator.py
"""
Slot generation for one provider, one day, one session type.

Pure: everything it needs is passed in, including `now`.

Per rule window [day@start_time, day@end_time):
  candidates every candidate_step_minutes, end = start + duration
  ✗ end past the window end (sessions are never clipped)
  ✗ overlapping an availability block
  ✗ overlapping a scheduled/rescheduled appointment
  ✗ starting before now + min_schedule_lead_hours

Windows of different rules are never merged, even when adjacent.
Result is deduplicated by start and sorted.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Sequence

from .config import BookingConfig, get_booking_config
from .intervals import (
    ensure_utc,
    local_date,
    local_datetime,
    overlaps,
    parse_time_of_day,
    rule_weekday,
)

Interval = tuple[datetime, datetime]

SLOT_AVAILABLE = "available"
SLOT_BOOKED = "booked"
SLOT_PAST = "past"
SLOT_BLOCKED = "blocked"


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime
    session_type: str


@dataclass(frozen=True)
class SlotWithStatus(Slot):
    status: str = SLOT_AVAILABLE


def earliest_bookable_start(now: datetime, config: BookingConfig) -> datetime:
    return ensure_utc(now) + timedelta(hours=config.min_schedule_lead_hours)


def generate_slots_for_day(
    day: date,
    session_type: str,
    rules: Iterable,
    duration_min: int,
    tz_name: str,
    blocks: Sequence[Interval],
    booked: Sequence[Interval],
    now: datetime,
    config: BookingConfig | None = None,
) -> list[Slot]:
    """
    Bookable slots for `day`.

    Args:
        rules: Objects with weekday/start_time/end_time/session_type/is_active
        blocks: Block intervals overlapping the day
        booked: Intervals of scheduled/rescheduled appointments
        now: Reference time for the lead-time cut-off

    Returns:
        Sorted list of Slot. Empty when no rule matches.
    """
    config = config or get_booking_config()
    cutoff = earliest_bookable_start(now, config)

    unique: dict[datetime, Slot] = {}
    for start, end in _iter_candidates(day, session_type, rules, duration_min, tz_name, config):
        if any(overlaps(start, end, b_start, b_end) for b_start, b_end in blocks):
            continue
        if any(overlaps(start, end, a_start, a_end) for a_start, a_end in booked):
            continue
        if start < cutoff:
            continue
        unique[start] = Slot(start=start, end=end, session_type=session_type)

    return [unique[key] for key in sorted(unique)]


def generate_slots_with_status(
    day: date,
    session_type: str,
    rules: Iterable,
    duration_min: int,
    tz_name: str,
    blocks: Sequence[Interval],
    booked: Sequence[Interval],
    now: datetime,
    config: BookingConfig | None = None,
) -> list[SlotWithStatus]:
    """
    Every candidate of the day's windows, labelled for the provider agenda.

    Precedence: booked > past > blocked > available. "past" covers every
    start before the lead-time cut-off.
    """
    config = config or get_booking_config()
    cutoff = earliest_bookable_start(now, config)

    unique: dict[datetime, SlotWithStatus] = {}
    for start, end in _iter_candidates(day, session_type, rules, duration_min, tz_name, config):
        if any(overlaps(start, end, a_start, a_end) for a_start, a_end in booked):
            status = SLOT_BOOKED
        elif start < cutoff:
            status = SLOT_PAST
        elif any(overlaps(start, end, b_start, b_end) for b_start, b_end in blocks):
            status = SLOT_BLOCKED
        else:
            status = SLOT_AVAILABLE
        unique[start] = SlotWithStatus(
            start=start, end=end, session_type=session_type, status=status
        )

    return [unique[key] for key in sorted(unique)]


# ── Helpers ──────────────────────────────────────────────────────────────


def is_candidate(
    start: datetime,
    end: datetime,
    session_type: str,
    rules: Iterable,
    tz_name: str,
    config: BookingConfig | None = None,
) -> bool:
    """True if [start, end) is a candidate of one of the rule windows of its local day."""
    config = config or get_booking_config()
    start, end = ensure_utc(start), ensure_utc(end)
    duration_min = int((end - start).total_seconds() // 60)
    day = local_date(start, tz_name)
    return (start, end) in _iter_candidates(day, session_type, rules, duration_min, tz_name, config)


def matching_rules(rules: Iterable, weekday: int, session_type: str) -> list:
    return [
        r for r in rules
        if r.is_active and r.weekday == weekday and r.session_type == session_type
    ]


def _iter_candidates(
    day: date,
    session_type: str,
    rules: Iterable,
    duration_min: int,
    tz_name: str,
    config: BookingConfig,
) -> Iterator[Interval]:
    """Yield (start, end) candidates that fit entirely inside one rule window."""
    if duration_min <= 0:
        return

    duration = timedelta(minutes=duration_min)
    step = timedelta(minutes=config.candidate_step_minutes)

    for rule in matching_rules(rules, rule_weekday(day), session_type):
        window_start = local_datetime(day, parse_time_of_day(rule.start_time), tz_name)
        window_end = local_datetime(day, parse_time_of_day(rule.end_time), tz_name)

        cursor = window_start
        while cursor < window_end:
            end = cursor + duration
            if end > window_end:
                break
            yield cursor, end
            cursor += step
