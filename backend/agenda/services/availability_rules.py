# backend/agenda/services/availability_rules.py
"""
Availability rule store.

The provider's rule set is saved as a whole: delete every rule of the
provider, then insert the new set, in one transaction. There is no partial
update and no diffing.
"""

import logging

from sqlalchemy.orm import Session

from ..errors import InvalidArgument
from ..models.generated import AvailabilityRules as DBRule
from .provider_settings import check_session_type, get_settings
from .slots.intervals import parse_time_of_day

logger = logging.getLogger(__name__)


def list_rules(db: Session, provider_id: int, active_only: bool = False) -> list[DBRule]:
    query = db.query(DBRule).filter(DBRule.provider_id == provider_id)
    if active_only:
        query = query.filter(DBRule.is_active.is_(True))
    return query.order_by(DBRule.weekday, DBRule.start_time, DBRule.id).all()


def replace_rules(db: Session, provider_id: int, rules: list[dict]) -> list[DBRule]:
    """
    Replace the provider's whole rule set.

    Each rule dict: weekday, start_time, end_time, session_type, is_active.
    Validation happens before anything is deleted.
    """
    get_settings(db, provider_id)

    rows = []
    for rule in rules:
        start = parse_time_of_day(rule["start_time"])
        end = parse_time_of_day(rule["end_time"])
        if start.second or end.second:
            raise InvalidArgument("Rule times have minute precision (HH:MM)")
        if end < start:
            raise InvalidArgument(
                f"Rule end {rule['end_time']} is before start {rule['start_time']}"
            )
        if not 0 <= rule["weekday"] <= 6:
            raise InvalidArgument(f"weekday must be 0..6, got {rule['weekday']}")
        rows.append(DBRule(
            provider_id=provider_id,
            weekday=rule["weekday"],
            start_time=start.strftime("%H:%M"),
            end_time=end.strftime("%H:%M"),
            session_type=check_session_type(rule["session_type"]),
            is_active=rule.get("is_active", True),
        ))

    try:
        db.query(DBRule).filter(DBRule.provider_id == provider_id).delete(
            synchronize_session=False
        )
        db.add_all(rows)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Availability rules replaced for provider {provider_id}: {len(rows)} rule(s)")
    return list_rules(db, provider_id)
