"""
Domain exceptions and their HTTP rendering.

Every error body carries a ``message`` key. Validation failures are
reported as 400 (not FastAPI's default 422) with field-level ``errors``.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tour_booking.core.logging import get_logger

logger = get_logger(__name__)


class InsufficientCapacityError(Exception):
    """Raised when a booking does not fit in the remaining spots for its day."""

    def __init__(self, details: str, remaining_spots: Optional[int]):
        super().__init__(details)
        self.details = details
        # None means the activity was not found; overbooked days stay negative
        self.remaining_spots = 0 if remaining_spots is None else remaining_spots


class AdmissionBusyError(Exception):
    """Raised when the admission lock for an activity/day cannot be acquired in time."""

    def __init__(self, key: str):
        super().__init__(f"Admission lock busy: {key}")
        self.key = key


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_failed", errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation error", "errors": jsonable_encoder(exc.errors())},
    )


async def _insufficient_capacity_handler(request: Request, exc: InsufficientCapacityError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": "Not enough capacity for this booking",
            "details": exc.details,
            "remainingSpots": exc.remaining_spots,
        },
    )


async def _admission_busy_handler(request: Request, exc: AdmissionBusyError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"message": "Booking is busy, please retry"},
        headers={"Retry-After": "1"},
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", error=str(exc), exc_type=type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(InsufficientCapacityError, _insufficient_capacity_handler)
    app.add_exception_handler(AdmissionBusyError, _admission_busy_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
