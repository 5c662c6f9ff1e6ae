from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from seatlock.core.exceptions import ShowAlreadyStarted
from seatlock.db.session import get_db
from seatlock.schemas.booking import (
    BookingCreate,
    Booking as BookingSchema,
    PendingBookingCreate,
    ReserveCreate,
)
from seatlock.services import inventory, reservations
from seatlock.utils.clock import as_utc, utcnow

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _ensure_bookable(db: Session, show_id: str) -> None:
    """404 for unknown shows, 400 once the show has started."""
    show = inventory.get_show(db, show_id)
    if as_utc(show.start_time) < utcnow():
        raise ShowAlreadyStarted()


# ---------------------------------------------------------------------------
# POST /bookings: atomic booking
# ---------------------------------------------------------------------------


@router.post("/", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_booking(data: BookingCreate, db: Session = Depends(get_db)):
    """
    Book seats in one step. The response is either a CONFIRMED booking or
    one of `SEATS_LOCKED` (409, retry), `SEATS_UNAVAILABLE` (409) or
    `INVALID_SEATS` (400); nothing is left half-applied.
    """
    _ensure_bookable(db, data.show_id)
    return reservations.create_booking(db, data.show_id, data.seat_ids, user_id=data.user_id)


# ---------------------------------------------------------------------------
# Deferred mode: hold, then confirm or fail
# ---------------------------------------------------------------------------


@router.post("/pending", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_pending_booking(data: PendingBookingCreate, db: Session = Depends(get_db)):
    """
    Record a PENDING booking with a deadline. Does not lock seats: hold them
    first via `POST /shows/{id}/holds` and pass the `hold_token`.
    """
    _ensure_bookable(db, data.show_id)
    return reservations.create_pending_booking(
        db,
        data.show_id,
        data.seat_ids,
        user_id=data.user_id,
        hold_token=data.hold_token,
    )


@router.post("/reserve", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def reserve(data: ReserveCreate, db: Session = Depends(get_db)):
    """Hold seats and create the PENDING booking for them in one transaction."""
    _ensure_bookable(db, data.show_id)
    return reservations.reserve(
        db,
        data.show_id,
        data.seat_ids,
        user_id=data.user_id,
        ttl_seconds=data.ttl_seconds,
    )


@router.post("/{booking_id}/confirm", response_model=BookingSchema)
def confirm_booking(booking_id: str, db: Session = Depends(get_db)):
    return reservations.confirm_booking(db, booking_id)


@router.post("/{booking_id}/fail", response_model=BookingSchema)
def fail_booking(booking_id: str, db: Session = Depends(get_db)):
    return reservations.fail_booking(db, booking_id)


# ---------------------------------------------------------------------------
# GET /bookings/{id}: polling
# ---------------------------------------------------------------------------


@router.get("/{booking_id}", response_model=BookingSchema)
def get_booking(booking_id: str, db: Session = Depends(get_db)):
    return reservations.get_booking(db, booking_id)
