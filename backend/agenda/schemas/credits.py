# backend/agenda/schemas/credits.py

from pydantic import BaseModel


class CreditBalanceRead(BaseModel):
    provider_id: int
    session_type: str
    total: int
    used: int
    available: int
