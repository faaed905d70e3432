# backend/agenda/schemas/orders.py

from typing import Optional
from pydantic import BaseModel, Field

from .common import SessionType, UtcDatetime
from .credits import CreditBalanceRead


class ProductCreate(BaseModel):
    title: str
    description: Optional[str] = None
    session_type: SessionType
    sessions_count: int = Field(gt=0)
    price_cents: int = Field(ge=0)


class ProductRead(BaseModel):
    id: int
    provider_id: int
    title: str
    description: Optional[str] = None
    session_type: str
    sessions_count: int
    price_cents: int
    is_active: bool

    model_config = {"from_attributes": True}


class OrderCreate(BaseModel):
    product_id: int
    payment_method: Optional[str] = Field(None, description="card | pix")


class OrderRead(BaseModel):
    id: int
    client_id: int
    provider_id: int
    product_id: int
    status: str
    amount_cents: int
    session_type: str
    sessions_count: int
    payment_method: Optional[str] = None
    credited_at: Optional[UtcDatetime] = None

    model_config = {"from_attributes": True}


class AddCreditsResponse(BaseModel):
    order_id: int
    credited: bool
    sessions: int
    balance: CreditBalanceRead
