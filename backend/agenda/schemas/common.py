# backend/agenda/schemas/common.py

from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator

from ..services.slots.intervals import ensure_utc

SessionType = Literal["video", "chat"]

# Stored values are naive UTC; API values always carry the offset
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
