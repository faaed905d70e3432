# backend/agenda/errors.py
"""
Domain errors of the booking engine.

Every business failure is a BookingError subclass carrying a stable `code`
and the HTTP status the API layer answers with. Infrastructure failures
(database or Redis down) are NOT BookingErrors and propagate as 5xx.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class BookingError(Exception):
    code = "BOOKING_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Booking error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidArgument(BookingError):
    code = "INVALID_ARGUMENT"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Invalid argument"


class NotAuthenticated(BookingError):
    code = "NOT_AUTHENTICATED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class Forbidden(BookingError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFound(BookingError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class LeadTimeViolation(BookingError):
    code = "LEAD_TIME_VIOLATION"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Slot starts too soon"


class SlotTaken(BookingError):
    """Another booking already occupies the interval. Re-pick a slot."""
    code = "SLOT_TAKEN"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Slot already taken"


class NoCredits(BookingError):
    code = "NO_CREDITS"
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = "No session credits available"


class CancelWindowClosed(BookingError):
    code = "CANCEL_WINDOW_CLOSED"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Too late to change this appointment"


class TransactionTimeout(BookingError):
    """Outcome unknown: the caller must re-query the ledger before retrying."""
    code = "TRANSACTION_TIMEOUT"
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_detail = "Booking outcome unknown, refresh appointments before retrying"


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )
