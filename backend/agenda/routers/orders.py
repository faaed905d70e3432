# backend/agenda/routers/orders.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import Identity, get_identity, require_provider
from ..database import get_db
from ..errors import Forbidden
from ..schemas.common import SessionType
from ..schemas.orders import OrderCreate, OrderRead, ProductCreate, ProductRead
from ..services.orders import create_order, create_product, list_products

router = APIRouter(tags=["orders"])


@router.get("/providers/{provider_id}/products", response_model=list[ProductRead])
def read_products(
    provider_id: int,
    session_type: SessionType | None = None,
    db: Session = Depends(get_db),
):
    return list_products(db, provider_id, session_type)


@router.post(
    "/providers/{provider_id}/products",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def add_product(
    provider_id: int,
    data: ProductCreate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    require_provider(identity, provider_id)
    return create_product(db, provider_id, data.model_dump())


@router.post("/orders", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def place_order(
    data: OrderCreate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Pending order; payment capture reports back via /internal/orders."""
    if identity.is_provider:
        raise Forbidden("Only clients buy sessions")
    return create_order(db, identity.user_id, data.product_id, data.payment_method)
