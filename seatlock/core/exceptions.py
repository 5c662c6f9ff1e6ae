"""Errors raised by the reservation core.

Every error is scoped to a single attempt: it is raised after the
surrounding transaction has been rolled back, so callers never observe
half-applied state. The HTTP status is only used by the API layer.
"""
import enum
from typing import Iterable, List, Optional


class ErrorKind(str, enum.Enum):
    CONTENTION = "CONTENTION"
    INVALID_INPUT = "INVALID_INPUT"
    UNAVAILABLE = "UNAVAILABLE"
    EXPIRED = "EXPIRED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"


class ReservationError(Exception):
    code = "RESERVATION_ERROR"
    kind = ErrorKind.INVALID_INPUT
    status_code = 400
    default_message = "Reservation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SeatsLocked(ReservationError):
    """Another transaction is mid-flight on an overlapping seat. Safe to retry."""

    code = "SEATS_LOCKED"
    kind = ErrorKind.CONTENTION
    status_code = 409
    default_message = "Some seats are currently being booked by another user. Please try again."


class InvalidSeats(ReservationError):
    code = "INVALID_SEATS"
    kind = ErrorKind.INVALID_INPUT
    status_code = 400
    default_message = "Invalid seat selection. Some seats do not exist for this show."


class SeatsUnavailable(ReservationError):
    code = "SEATS_UNAVAILABLE"
    kind = ErrorKind.UNAVAILABLE
    status_code = 409
    default_message = "One or more selected seats are no longer available."

    def __init__(self, seat_ids: Iterable[str] = (), message: Optional[str] = None):
        self.seat_ids: List[str] = list(seat_ids)
        super().__init__(message)


class HoldExpired(ReservationError):
    code = "HOLD_EXPIRED"
    kind = ErrorKind.EXPIRED
    status_code = 409
    default_message = "The seat hold for this booking has expired."


class ShowNotFound(ReservationError):
    code = "SHOW_NOT_FOUND"
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Show not found"


class BookingNotFound(ReservationError):
    code = "BOOKING_NOT_FOUND"
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Booking not found"


class InvalidBookingState(ReservationError):
    code = "INVALID_BOOKING_STATE"
    kind = ErrorKind.INVALID_STATE
    status_code = 409
    default_message = "Booking is no longer pending"


class ShowAlreadyStarted(ReservationError):
    code = "SHOW_STARTED"
    kind = ErrorKind.INVALID_INPUT
    status_code = 400
    default_message = "Cannot book for past shows"
