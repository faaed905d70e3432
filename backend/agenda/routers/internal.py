# backend/agenda/routers/internal.py
"""
Internal API endpoints for trusted consumers.

Called by the payment service after a card/PIX payment settles. NOT exposed
through the public gateway.

Access: localhost only
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.credits import CreditBalanceRead
from ..schemas.orders import AddCreditsResponse, OrderRead
from ..services.credits import add_credits_from_order
from ..services.events import emit_event
from ..services.orders import mark_order_failed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal", tags=["internal"])

TRUSTED_HOSTS = ("127.0.0.1", "localhost", "::1")


def require_internal_caller(request: Request) -> None:
    """Only allow requests from localhost."""
    client_host = request.client.host if request.client else None
    if client_host is not None and client_host not in TRUSTED_HOSTS:
        logger.warning(f"Internal endpoint called from non-localhost: {client_host}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Internal endpoints are only accessible from localhost"
        )


@router.post(
    "/orders/{order_id}/paid",
    response_model=AddCreditsResponse,
    dependencies=[Depends(require_internal_caller)],
)
def order_paid(order_id: int, db: Session = Depends(get_db)):
    """
    AddCredits: mark the order paid and credit its sessions.

    Idempotent: webhook retries return credited=false and change nothing.
    """
    result = add_credits_from_order(db, order_id)
    balance = result["balance"]

    if result["credited"]:
        emit_event("credits_added", {
            "order_id": order_id,
            "sessions": result["sessions"],
        })

    return AddCreditsResponse(
        order_id=order_id,
        credited=result["credited"],
        sessions=result["sessions"],
        balance=CreditBalanceRead(
            provider_id=result["provider_id"],
            session_type=result["session_type"],
            total=balance.total,
            used=balance.used,
            available=balance.available,
        ),
    )


@router.post(
    "/orders/{order_id}/failed",
    response_model=OrderRead,
    dependencies=[Depends(require_internal_caller)],
)
def order_failed(order_id: int, db: Session = Depends(get_db)):
    return mark_order_failed(db, order_id)
