# backend/agenda/routers/availability_blocks.py
# PATCH = 405, DELETE = ALLOWED (hard)

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth import Identity, get_identity, require_provider
from ..database import get_db
from ..schemas.availability_blocks import AvailabilityBlockCreate, AvailabilityBlockRead
from ..services.availability_blocks import create_block, delete_block, get_blocks
from ..services.provider_settings import get_settings
from ..services.slots.intervals import UTC

router = APIRouter(prefix="/providers", tags=["availability_blocks"])


@router.get("/{provider_id}/availability_blocks", response_model=list[AvailabilityBlockRead])
def list_blocks(
    provider_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    db: Session = Depends(get_db),
):
    """Blocks overlapping [start, end); open-ended when omitted."""
    get_settings(db, provider_id)
    start = start or datetime(1970, 1, 1, tzinfo=UTC)
    end = end or datetime(9999, 1, 1, tzinfo=UTC)
    return get_blocks(db, provider_id, start, end)


@router.post(
    "/{provider_id}/availability_blocks",
    response_model=AvailabilityBlockRead,
    status_code=status.HTTP_201_CREATED,
)
def add_block(
    provider_id: int,
    data: AvailabilityBlockCreate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    require_provider(identity, provider_id)
    return create_block(db, provider_id, data.start_at, data.end_at, data.reason)


@router.patch("/{provider_id}/availability_blocks/{block_id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete(
    "/{provider_id}/availability_blocks/{block_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def remove_block(
    provider_id: int,
    block_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    require_provider(identity, provider_id)
    delete_block(db, provider_id, block_id)
