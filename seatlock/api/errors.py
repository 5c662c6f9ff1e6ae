import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from seatlock.core.exceptions import ReservationError, SeatsLocked, SeatsUnavailable
from seatlock.db.session import is_lock_contention
from seatlock.schemas.common import ErrorResponse, SeatsUnavailableError

logger = logging.getLogger(__name__)


async def reservation_error_handler(request: Request, exc: ReservationError) -> JSONResponse:
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    if isinstance(exc, SeatsUnavailable):
        body = SeatsUnavailableError(
            error=exc.code,
            message=exc.message,
            unavailable_seat_ids=exc.seat_ids,
        )
    else:
        body = ErrorResponse(error=exc.code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    # Lock errors raised outside the engine's own transactions (e.g. boundary reads)
    if is_lock_contention(exc):
        return await reservation_error_handler(request, SeatsLocked())
    logger.exception("Database error on %s %s", request.method, request.url.path)
    body = ErrorResponse(error="DATABASE_ERROR", message="Database unavailable. Please try again.")
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump())


EXCEPTION_HANDLERS = {
    ReservationError: reservation_error_handler,
    OperationalError: operational_error_handler,
}


def register_exception_handlers(app: FastAPI):
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
