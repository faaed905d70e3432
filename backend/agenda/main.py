# backend/agenda/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

from .config import settings
from .database import SessionLocal, init_db
from .errors import BookingError, booking_error_handler
from .routers import (
    availability_blocks,
    availability_rules,
    bookings,
    credits,
    internal,
    orders,
    provider_settings,
    slots,
)

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Agenda API started")
    yield


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(title="Agenda Booking API", lifespan=lifespan if with_lifespan else None)

    app.add_exception_handler(BookingError, booking_error_handler)

    app.include_router(provider_settings.router)
    app.include_router(availability_rules.router)
    app.include_router(availability_blocks.router)
    app.include_router(slots.router)
    app.include_router(bookings.router)
    app.include_router(credits.router)
    app.include_router(orders.router)
    app.include_router(internal.router)

    @app.get("/health")
    def health():
        db = SessionLocal()
        try:
            return {"db": db.execute(text("SELECT 1")).scalar() == 1}
        finally:
            db.close()

    return app


app = create_app()
