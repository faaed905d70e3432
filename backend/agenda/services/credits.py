# backend/agenda/services/credits.py
"""
Credit ledger.

One row per (client, provider, session_type) with purchased `total` and
consumed `used` counters.

- total grows only through add_credits_from_order (once per paid order)
- used grows only through the booking transaction (consume_credit)
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from ..errors import InvalidArgument, NotFound
from ..models.generated import Orders as DBOrder, SessionCredits as DBCredit
from .slots.intervals import UTC, to_db

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditBalance:
    total: int
    used: int

    @property
    def available(self) -> int:
        # used > total should be impossible; never report a negative balance
        return max(0, self.total - self.used)


def get_balance(
    db: Session,
    client_id: int,
    provider_id: int,
    session_type: str,
) -> CreditBalance:
    """Balance for one credit line. Missing row = zero balance."""
    row = (
        db.query(DBCredit)
        .filter(
            DBCredit.client_id == client_id,
            DBCredit.provider_id == provider_id,
            DBCredit.session_type == session_type,
        )
        .first()
    )
    if not row:
        return CreditBalance(total=0, used=0)
    return CreditBalance(total=row.total, used=row.used)


def consume_credit(
    db: Session,
    client_id: int,
    provider_id: int,
    session_type: str,
) -> bool:
    """
    Increment `used` by one if a credit is available.

    Runs inside the caller's transaction and does not commit. The update is
    conditional on used < total, so the counter can never overshoot.

    Returns:
        True if a credit was consumed.
    """
    result = db.execute(
        update(DBCredit)
        .where(
            DBCredit.client_id == client_id,
            DBCredit.provider_id == provider_id,
            DBCredit.session_type == session_type,
            DBCredit.used < DBCredit.total,
        )
        .values(used=DBCredit.used + 1, updated_at=func.current_timestamp())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def add_credits_from_order(db: Session, order_id: int) -> dict:
    """
    Mark an order paid and credit its sessions, exactly once.

    Safe to call repeatedly (payment webhooks are retried): the order row is
    claimed with a conditional update on credited_at IS NULL, and only the
    call that wins the claim touches the credit line.

    Returns:
        {"order_id", "provider_id", "session_type", "credited": bool,
         "sessions": int, "balance": CreditBalance}
    """
    now = to_db(datetime.now(UTC))

    claimed = db.execute(
        update(DBOrder)
        .where(
            DBOrder.id == order_id,
            DBOrder.credited_at.is_(None),
            DBOrder.status.in_(("pending", "paid")),
        )
        .values(status="paid", credited_at=now)
        .execution_options(synchronize_session=False)
    ).rowcount

    order = db.get(DBOrder, order_id, populate_existing=True)
    if not order:
        db.rollback()
        raise NotFound(f"Order {order_id} not found")

    if not claimed:
        db.rollback()
        if order.credited_at is None:
            raise InvalidArgument(f"Order {order_id} is {order.status}, cannot be credited")
        logger.info(f"Order {order_id} already credited at {order.credited_at}, skipping")
        return {
            "order_id": order_id,
            "provider_id": order.provider_id,
            "session_type": order.session_type,
            "credited": False,
            "sessions": 0,
            "balance": get_balance(db, order.client_id, order.provider_id, order.session_type),
        }

    try:
        _increase_total(
            db,
            client_id=order.client_id,
            provider_id=order.provider_id,
            session_type=order.session_type,
            sessions=order.sessions_count,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Order {order_id}: +{order.sessions_count} {order.session_type} credit(s) "
        f"for client {order.client_id}"
    )
    return {
        "order_id": order_id,
        "provider_id": order.provider_id,
        "session_type": order.session_type,
        "credited": True,
        "sessions": order.sessions_count,
        "balance": get_balance(db, order.client_id, order.provider_id, order.session_type),
    }


def _increase_total(
    db: Session,
    client_id: int,
    provider_id: int,
    session_type: str,
    sessions: int,
) -> None:
    """Add `sessions` to the credit line, creating it if needed."""
    if sessions <= 0:
        raise InvalidArgument("sessions must be positive")

    filters = (
        DBCredit.client_id == client_id,
        DBCredit.provider_id == provider_id,
        DBCredit.session_type == session_type,
    )
    stmt = (
        update(DBCredit)
        .where(*filters)
        .values(total=DBCredit.total + sessions, updated_at=func.current_timestamp())
        .execution_options(synchronize_session=False)
    )
    if db.execute(stmt).rowcount:
        return

    # A concurrent first grant for the same line fails the unique constraint;
    # the caller rolls back the whole claim, so a webhook retry is safe.
    db.add(DBCredit(
        client_id=client_id,
        provider_id=provider_id,
        session_type=session_type,
        total=sessions,
        used=0,
    ))
    db.flush()
