# backend/agenda/schemas/availability_rules.py

from pydantic import BaseModel, Field

from .common import SessionType


class AvailabilityRuleIn(BaseModel):
    weekday: int = Field(ge=0, le=6, description="0 = Sunday … 6 = Saturday")
    start_time: str = Field(description="HH:MM")
    end_time: str = Field(description="HH:MM")
    session_type: SessionType
    is_active: bool = True


class AvailabilityRulesReplace(BaseModel):
    """The complete rule set; whatever is not listed is deleted."""
    rules: list[AvailabilityRuleIn]


class AvailabilityRuleRead(BaseModel):
    id: int
    provider_id: int
    weekday: int
    start_time: str
    end_time: str
    session_type: str
    is_active: bool

    model_config = {"from_attributes": True}
