# backend/agenda/routers/credits.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import Identity, get_identity
from ..database import get_db
from ..errors import Forbidden
from ..schemas.common import SessionType
from ..schemas.credits import CreditBalanceRead
from ..services.credits import get_balance

router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("/balance", response_model=CreditBalanceRead)
def read_balance(
    provider_id: int,
    session_type: SessionType,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Caller's own credit line. Never negative."""
    if identity.is_provider:
        raise Forbidden("Credits belong to clients")

    balance = get_balance(db, identity.user_id, provider_id, session_type)
    return CreditBalanceRead(
        provider_id=provider_id,
        session_type=session_type,
        total=balance.total,
        used=balance.used,
        available=balance.available,
    )
