"""
Inventory store access: shows, their seats, and booking reads.

Functions that only read never commit. ``create_show`` and ``delete_show``
run as their own transaction; the counter helper is meant to be called
inside a caller's transaction, next to the seat change it reflects.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from seatlock.core.config import settings
from seatlock.core.exceptions import BookingNotFound, InvalidSeats, ShowNotFound
from seatlock.db.unit_of_work import unit_of_work
from seatlock.models.booking import Booking, BookingStatus
from seatlock.models.seat import Seat, SeatStatus
from seatlock.models.show import Show
from seatlock.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shows
# ---------------------------------------------------------------------------


def list_shows(db: Session) -> List[Show]:
    return db.query(Show).order_by(Show.start_time).all()


def get_show(db: Session, show_id: str) -> Show:
    show = db.query(Show).filter(Show.id == show_id).first()
    if not show:
        raise ShowNotFound()
    return show


def get_show_with_seats(db: Session, show_id: str) -> Show:
    show = (
        db.query(Show)
        .options(selectinload(Show.seats))
        .filter(Show.id == show_id)
        .first()
    )
    if not show:
        raise ShowNotFound()
    return show


def create_show(db: Session, name: str, start_time: datetime, total_seats: int) -> Show:
    """Insert a show with ``available_seats = total_seats`` and its seats 1..N."""
    if not 1 <= total_seats <= settings.MAX_SEATS_PER_SHOW:
        raise InvalidSeats(f"A show must have between 1 and {settings.MAX_SEATS_PER_SHOW} seats")

    with unit_of_work(db):
        show = Show(
            name=name,
            start_time=as_utc(start_time),
            total_seats=total_seats,
            available_seats=total_seats,
        )
        db.add(show)
        db.flush()
        create_seats(db, show.id, total_seats)
        db.refresh(show)

    logger.info("Created show %s (%s) with %d seats", show.id, show.name, total_seats)
    return show


def create_seats(db: Session, show_id: str, count: int) -> List[Seat]:
    """Bulk insert ``count`` AVAILABLE seats numbered sequentially from 1."""
    seats = [
        Seat(show_id=show_id, seat_number=number, status=SeatStatus.AVAILABLE)
        for number in range(1, count + 1)
    ]
    db.add_all(seats)
    db.flush()
    return seats


def delete_show(db: Session, show_id: str) -> None:
    """Delete a show together with its seats and bookings."""
    with unit_of_work(db):
        show = get_show(db, show_id)
        db.delete(show)
    logger.info("Deleted show %s", show_id)


def adjust_available_seats(db: Session, show_id: str, delta: int) -> None:
    """Apply ``delta`` to the cached counter as a single SQL update."""
    db.query(Show).filter(Show.id == show_id).update(
        {Show.available_seats: Show.available_seats + delta},
        synchronize_session="fetch",
    )


# ---------------------------------------------------------------------------
# Seats
# ---------------------------------------------------------------------------


def get_seats(db: Session, show_id: str) -> List[Seat]:
    return (
        db.query(Seat)
        .filter(Seat.show_id == show_id)
        .order_by(Seat.seat_number)
        .all()
    )


def count_seats_by_status(db: Session, show_id: str) -> Dict[SeatStatus, int]:
    counts = {status: 0 for status in SeatStatus}
    rows = (
        db.query(Seat.status, func.count(Seat.id))
        .filter(Seat.show_id == show_id)
        .group_by(Seat.status)
        .all()
    )
    for status, count in rows:
        counts[SeatStatus(status)] = count
    return counts


def find_foreign_seats(db: Session, show_id: str, seat_ids: List[str]) -> List[str]:
    """Return the requested ids that are not seats of ``show_id``."""
    found = {
        seat_id
        for (seat_id,) in db.query(Seat.id).filter(
            Seat.show_id == show_id,
            Seat.id.in_(seat_ids),
        )
    }
    return [seat_id for seat_id in seat_ids if seat_id not in found]


def expired_hold_query(db: Session, now: Optional[datetime] = None):
    now = now or utcnow()
    return db.query(Seat).filter(
        Seat.status == SeatStatus.PENDING,
        Seat.locked_until < now,
    )


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


def get_booking(db: Session, booking_id: str) -> Booking:
    booking = (
        db.query(Booking)
        .options(selectinload(Booking.seats))
        .filter(Booking.id == booking_id)
        .populate_existing()
        .first()
    )
    if not booking:
        raise BookingNotFound()
    return booking


def overdue_pending_booking_ids(db: Session, now: Optional[datetime] = None) -> List[str]:
    now = now or utcnow()
    return [
        booking_id
        for (booking_id,) in db.query(Booking.id)
        .filter(
            Booking.status == BookingStatus.PENDING,
            Booking.expires_at < now,
        )
        .order_by(Booking.expires_at)
    ]
