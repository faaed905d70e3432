# backend/agenda/services/availability_blocks.py
"""Availability blocks: absolute-time exceptions (vacations, holds)."""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ..errors import InvalidArgument, NotFound
from ..models.generated import AvailabilityBlocks as DBBlock
from .provider_settings import get_settings
from .slots.intervals import ensure_utc, from_db, to_db

logger = logging.getLogger(__name__)


def get_blocks(
    db: Session,
    provider_id: int,
    window_start: datetime,
    window_end: datetime,
) -> list[DBBlock]:
    """Blocks overlapping [window_start, window_end), including multi-day ones."""
    return (
        db.query(DBBlock)
        .filter(
            DBBlock.provider_id == provider_id,
            DBBlock.start_at < to_db(window_end),
            DBBlock.end_at > to_db(window_start),
        )
        .order_by(DBBlock.start_at)
        .all()
    )


def block_intervals(blocks: list[DBBlock]) -> list[tuple[datetime, datetime]]:
    return [(from_db(b.start_at), from_db(b.end_at)) for b in blocks]


def create_block(
    db: Session,
    provider_id: int,
    start_at: datetime,
    end_at: datetime,
    reason: str | None = None,
) -> DBBlock:
    get_settings(db, provider_id)
    start_at, end_at = ensure_utc(start_at), ensure_utc(end_at)
    if end_at <= start_at:
        raise InvalidArgument("Block end must be after its start")

    obj = DBBlock(
        provider_id=provider_id,
        start_at=to_db(start_at),
        end_at=to_db(end_at),
        reason=reason,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info(f"Block {obj.id} created for provider {provider_id}: {start_at} → {end_at}")
    return obj


def delete_block(db: Session, provider_id: int, block_id: int) -> None:
    obj = db.get(DBBlock, block_id)
    if not obj or obj.provider_id != provider_id:
        raise NotFound(f"Block {block_id} not found")
    db.delete(obj)
    db.commit()
    logger.info(f"Block {block_id} deleted for provider {provider_id}")
