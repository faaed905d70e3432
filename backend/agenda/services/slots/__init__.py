# backend/agenda/services/slots/__init__.py
"""
Slots calculation module.

generator: pure slot generation from rules, blocks and booked intervals
availability: store reads + generation per request (no cache),
              import it as services.slots.availability
"""

from .config import BookingConfig, get_booking_config
from .generator import Slot, SlotWithStatus, generate_slots_for_day, generate_slots_with_status

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "Slot",
    "SlotWithStatus",
    "generate_slots_for_day",
    "generate_slots_with_status",
]
