"""
backend/agenda/services/events.py

Domain events for the notification consumer (e-mail, in-app bell).

Events go to the Redis list `events:p2p`, one JSON object each:
    {"type": "appointment_booked", "ts": 1760000000, ...payload}

Delivery is best-effort. A Redis failure is logged and never fails the
booking or payment that produced the event.
"""

import json
import logging
import time

from ..config import settings

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"

EVENT_TYPES = (
    "appointment_booked",
    "appointment_rescheduled",
    "appointment_status_changed",
    "credits_added",
)


def emit_event(event_type: str, payload: dict) -> None:
    if not settings.events_enabled:
        return
    if event_type not in EVENT_TYPES:
        logger.warning(f"Unknown event type {event_type!r}, emitting anyway")

    message = json.dumps(
        {"type": event_type, "ts": int(time.time()), **payload},
        default=str,
    )
    try:
        from ..redis_client import redis_client

        redis_client.rpush(P2P_QUEUE, message)
    except Exception as e:
        logger.error(f"Event {event_type} not delivered to {P2P_QUEUE}: {e}")
        return
    logger.debug(f"Event {event_type} queued")
