# backend/agenda/routers/slots.py
"""
Slots API endpoints.

GET /slots/day        - Bookable slots for a day (GetSlots)
GET /slots/day/status - Provider agenda: every candidate with its status
GET /slots/calendar   - Open slot count per day (availability dots)
"""

from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Identity, get_identity, require_provider
from ..database import get_db
from ..errors import InvalidArgument
from ..schemas.common import SessionType
from ..schemas.slots import (
    SlotRead,
    SlotWithStatusRead,
    SlotsCalendarResponse,
    SlotsDayResponse,
    SlotsDayStatus,
    SlotsDayStatusResponse,
)
from ..services.provider_settings import get_settings, session_duration
from ..services.slots import get_booking_config
from ..services.slots.availability import (
    get_slots,
    get_slots_calendar,
    get_slots_with_status,
    provider_today,
)


router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    provider_id: int,
    session_type: SessionType,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Bookable slots for a provider, session type and day."""
    config = get_booking_config()
    provider = get_settings(db, provider_id)

    today = provider_today(db, provider_id)
    if target_date < today:
        raise InvalidArgument("Date cannot be in the past")
    if target_date > today + timedelta(days=config.horizon_days):
        raise InvalidArgument(f"Date cannot be more than {config.horizon_days} days ahead")

    slots = get_slots(db, provider_id, target_date, session_type, config=config)

    return SlotsDayResponse(
        provider_id=provider_id,
        date=target_date,
        session_type=session_type,
        session_duration_min=session_duration(provider, session_type),
        slots=[SlotRead.model_validate(s) for s in slots],
    )


@router.get("/day/status", response_model=SlotsDayStatusResponse)
def get_slots_day_status(
    provider_id: int,
    session_type: SessionType,
    target_date: date = Query(..., alias="date"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Provider's own agenda for a day, including booked/blocked/past candidates."""
    require_provider(identity, provider_id)
    slots = get_slots_with_status(db, provider_id, target_date, session_type)

    return SlotsDayStatusResponse(
        provider_id=provider_id,
        date=target_date,
        session_type=session_type,
        slots=[SlotWithStatusRead.model_validate(s) for s in slots],
    )


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_calendar(
    provider_id: int,
    session_type: SessionType,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    """Calendar of days with open slots, clamped to today … today + horizon."""
    config = get_booking_config()
    today = provider_today(db, provider_id)
    max_date = today + timedelta(days=config.horizon_days)

    if start_date is None or start_date < today:
        start_date = today
    if end_date is None or end_date > max_date:
        end_date = max_date
    if end_date < start_date:
        end_date = start_date

    counts = get_slots_calendar(
        db, provider_id, session_type, start_date, end_date, config=config
    )

    return SlotsCalendarResponse(
        provider_id=provider_id,
        session_type=session_type,
        start_date=start_date,
        end_date=end_date,
        days=[
            SlotsDayStatus(date=dt, has_slots=count > 0, open_slots_count=count)
            for dt, count in counts
        ],
        horizon_days=config.horizon_days,
        min_schedule_lead_hours=config.min_schedule_lead_hours,
        candidate_step_minutes=config.candidate_step_minutes,
    )
