# backend/agenda/schemas/bookings.py

from typing import Literal, Optional
from pydantic import BaseModel

from .common import SessionType, UtcDatetime


class BookingCreate(BaseModel):
    provider_id: int
    session_type: SessionType
    start: UtcDatetime
    end: UtcDatetime


class BookingCreated(BaseModel):
    appointment_id: int
    status: str = "scheduled"


class BookingReschedule(BaseModel):
    start: UtcDatetime
    end: UtcDatetime


class BookingStatusUpdate(BaseModel):
    status: Literal["completed", "cancelled"]
    reason: Optional[str] = None


class AppointmentRead(BaseModel):
    id: int
    client_id: int
    provider_id: int
    session_type: str
    status: str

    start_at: UtcDatetime
    end_at: UtcDatetime

    cancel_reason: Optional[str] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = {"from_attributes": True}
