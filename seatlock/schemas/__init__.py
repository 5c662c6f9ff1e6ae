from seatlock.schemas.common import ErrorResponse, SeatsUnavailableError, HealthResponse, SweepResponse
from seatlock.schemas.seat import (
    Seat, HoldRequest, HoldResponse, HoldReleaseRequest, HoldReleaseResponse,
)
from seatlock.schemas.show import Show, ShowCreate, ShowWithSeats
from seatlock.schemas.booking import Booking, BookingCreate, ReserveCreate, PendingBookingCreate
