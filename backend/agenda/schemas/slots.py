# backend/agenda/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from pydantic import BaseModel, Field

from .common import UtcDatetime


class SlotRead(BaseModel):
    """A bookable time range. Derived, must be re-validated at booking."""
    start: UtcDatetime
    end: UtcDatetime
    session_type: str

    model_config = {"from_attributes": True}


class SlotWithStatusRead(SlotRead):
    status: str = Field(description="available | booked | past | blocked")


class SlotsDayResponse(BaseModel):
    """Bookable slots for one day."""
    provider_id: int
    date: date
    session_type: str
    session_duration_min: int
    slots: list[SlotRead]


class SlotsDayStatusResponse(BaseModel):
    """Provider agenda view: every candidate with its status."""
    provider_id: int
    date: date
    session_type: str
    slots: list[SlotWithStatusRead]


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    has_slots: bool
    open_slots_count: int = 0


class SlotsCalendarResponse(BaseModel):
    """Response with calendar of available days."""
    provider_id: int
    session_type: str
    start_date: date
    end_date: date
    days: list[SlotsDayStatus]

    # Metadata
    horizon_days: int
    min_schedule_lead_hours: int
    candidate_step_minutes: int
