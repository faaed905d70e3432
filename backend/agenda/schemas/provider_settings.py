# backend/agenda/schemas/provider_settings.py

from typing import Optional
from pydantic import BaseModel, Field


class ProviderSettingsUpdate(BaseModel):
    timezone: Optional[str] = None
    session_duration_video_min: Optional[int] = Field(None, ge=1, le=24 * 60)
    session_duration_chat_min: Optional[int] = Field(None, ge=1, le=24 * 60)
    min_cancel_hours: Optional[int] = Field(None, ge=0)

    model_config = {"from_attributes": True}


class ProviderSettingsRead(BaseModel):
    provider_id: int
    timezone: str
    session_duration_video_min: int
    session_duration_chat_min: int
    min_cancel_hours: int

    model_config = {"from_attributes": True}
