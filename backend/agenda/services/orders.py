# backend/agenda/services/orders.py
"""
Products and orders.

A product is a pack of `sessions_count` sessions of one type. An order
freezes the product's price, type and count at purchase time; payment
capture happens elsewhere and reports back through add_credits_from_order.
"""

import logging

from sqlalchemy.orm import Session

from ..errors import InvalidArgument, NotFound
from ..models.generated import Orders as DBOrder, Products as DBProduct
from .provider_settings import check_session_type, get_settings

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("card", "pix")


def list_products(db: Session, provider_id: int, session_type: str | None = None) -> list[DBProduct]:
    query = db.query(DBProduct).filter(
        DBProduct.provider_id == provider_id,
        DBProduct.is_active.is_(True),
    )
    if session_type:
        query = query.filter(DBProduct.session_type == check_session_type(session_type))
    return query.order_by(DBProduct.sessions_count.asc()).all()


def create_product(db: Session, provider_id: int, data: dict) -> DBProduct:
    get_settings(db, provider_id)
    check_session_type(data["session_type"])
    if data["sessions_count"] <= 0:
        raise InvalidArgument("sessions_count must be positive")
    if data["price_cents"] < 0:
        raise InvalidArgument("price_cents must be >= 0")

    obj = DBProduct(provider_id=provider_id, **data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def create_order(
    db: Session,
    client_id: int,
    product_id: int,
    payment_method: str | None = None,
) -> DBOrder:
    """Create a pending order for an active product."""
    product = db.get(DBProduct, product_id)
    if not product or not product.is_active:
        raise NotFound(f"Product {product_id} not found")
    if payment_method is not None and payment_method not in PAYMENT_METHODS:
        raise InvalidArgument(f"Unknown payment method: {payment_method!r}")

    order = DBOrder(
        client_id=client_id,
        provider_id=product.provider_id,
        product_id=product.id,
        status="pending",
        amount_cents=product.price_cents,
        session_type=product.session_type,
        sessions_count=product.sessions_count,
        payment_method=payment_method,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order.id} created: client={client_id} product={product_id}")
    return order


def mark_order_failed(db: Session, order_id: int) -> DBOrder:
    """Payment failed; only a still-pending order changes."""
    order = db.get(DBOrder, order_id)
    if not order:
        raise NotFound(f"Order {order_id} not found")
    if order.status == "pending":
        order.status = "failed"
        db.commit()
        db.refresh(order)
        logger.info(f"Order {order_id} marked failed")
    return order
