# backend/agenda/schemas/availability_blocks.py

from typing import Optional
from pydantic import BaseModel

from .common import UtcDatetime


class AvailabilityBlockCreate(BaseModel):
    start_at: UtcDatetime
    end_at: UtcDatetime
    reason: Optional[str] = None


class AvailabilityBlockRead(BaseModel):
    id: int
    provider_id: int
    start_at: UtcDatetime
    end_at: UtcDatetime
    reason: Optional[str] = None

    model_config = {"from_attributes": True}
