# backend/agenda/services/provider_settings.py
"""Provider settings: timezone, per-type session duration, cancel window."""

import logging

from sqlalchemy.orm import Session

from ..errors import InvalidArgument, NotFound
from ..models.generated import ProviderSettings as DBSettings
from .slots.config import SESSION_TYPES
from .slots.intervals import get_timezone

logger = logging.getLogger(__name__)


def get_settings(db: Session, provider_id: int) -> DBSettings:
    obj = db.get(DBSettings, provider_id)
    if not obj:
        raise NotFound(f"Provider {provider_id} not found")
    return obj


def upsert_settings(db: Session, provider_id: int, data: dict) -> DBSettings:
    """Create or update the provider's settings row."""
    if "timezone" in data and data["timezone"] is not None:
        get_timezone(data["timezone"])

    obj = db.get(DBSettings, provider_id)
    if obj is None:
        obj = DBSettings(provider_id=provider_id)
        db.add(obj)

    for field, value in data.items():
        if value is not None:
            setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    logger.info(f"Settings saved for provider {provider_id}")
    return obj


def session_duration(provider: DBSettings, session_type: str) -> int:
    """Session length in minutes for the given type."""
    check_session_type(session_type)
    if session_type == "video":
        return provider.session_duration_video_min
    return provider.session_duration_chat_min


def check_session_type(session_type: str) -> str:
    if session_type not in SESSION_TYPES:
        raise InvalidArgument(f"Unknown session type: {session_type!r}")
    return session_type
