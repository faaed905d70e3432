# backend/agenda/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings

SESSION_TYPES = ("video", "chat")
BLOCKING_STATUSES = ("scheduled", "rescheduled")


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for booking/slots system.

    Platform-wide: the UI honours the same lead time, it is not a per-call
    or per-provider parameter.

    Attributes:
        candidate_step_minutes: Distance between candidate slot starts
        min_schedule_lead_hours: Minimum hours between now and a bookable start
        horizon_days: How many days ahead the calendar view reaches
        booking_timeout_seconds: Upper bound for acquiring the provider lock
    """
    candidate_step_minutes: int = 10
    min_schedule_lead_hours: int = 24
    horizon_days: int = 45
    booking_timeout_seconds: float = 10.0

    def __post_init__(self):
        """Validate configuration."""
        if self.candidate_step_minutes <= 0 or 1440 % self.candidate_step_minutes:
            raise ValueError(
                f"candidate_step_minutes must divide a day, got {self.candidate_step_minutes}"
            )
        if self.min_schedule_lead_hours < 0:
            raise ValueError("min_schedule_lead_hours must be >= 0")
        if self.booking_timeout_seconds <= 0:
            raise ValueError("booking_timeout_seconds must be > 0")


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton, built from application settings)."""
    return BookingConfig(
        candidate_step_minutes=settings.candidate_step_minutes,
        min_schedule_lead_hours=settings.min_schedule_lead_hours,
        horizon_days=settings.horizon_days,
        booking_timeout_seconds=settings.booking_timeout_seconds,
    )
