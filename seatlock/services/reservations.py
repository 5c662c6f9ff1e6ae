"""
Reservation engine.

Two ways from "seats free" to "seats booked", both built on
``seat_locks.acquire_seats``:

* atomic: ``create_booking`` locks, books, decrements the show counter and
  inserts a CONFIRMED booking in one transaction.
* deferred: ``hold`` / ``create_pending_booking`` / ``confirm_booking`` /
  ``fail_booking`` for flows with an external step between hold and
  confirm. ``reserve`` is the same flow with hold and pending booking taken
  in a single transaction.

Every function here is one transaction. Errors are raised after rollback.
"""
import logging
import uuid
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from seatlock.core.config import settings
from seatlock.core.exceptions import (
    BookingNotFound,
    HoldExpired,
    InvalidBookingState,
    InvalidSeats,
)
from seatlock.db.unit_of_work import unit_of_work
from seatlock.models.booking import Booking, BookingSeat, BookingStatus
from seatlock.models.seat import SeatStatus
from seatlock.services import inventory
from seatlock.services.seat_locks import (
    SeatHold,
    acquire_seats,
    hold_seats,
    is_held,
    lock_seat_rows,
    normalize_seat_ids,
    release_locked_seats,
    release_seats,
    resolve_ttl,
)
from seatlock.utils.clock import as_utc, expires_in, utcnow

logger = logging.getLogger(__name__)


def _new_booking(
    show_id: str,
    seat_ids: List[str],
    status: BookingStatus,
    user_id: Optional[str] = None,
    **fields,
) -> Booking:
    return Booking(
        show_id=show_id,
        user_id=user_id,
        status=status,
        seats=[
            BookingSeat(seat_id=seat_id, position=position)
            for position, seat_id in enumerate(seat_ids)
        ],
        **fields,
    )


def _lock_pending_booking(db: Session, booking_id: str) -> Booking:
    booking = (
        db.query(Booking)
        .filter(Booking.id == booking_id)
        .populate_existing()
        .with_for_update(nowait=True)
        .first()
    )
    if not booking:
        raise BookingNotFound()
    if booking.status != BookingStatus.PENDING:
        raise InvalidBookingState(f"Booking is already {booking.status.value}")
    return booking


# ---------------------------------------------------------------------------
# Atomic mode
# ---------------------------------------------------------------------------


def create_booking(
    db: Session,
    show_id: str,
    seat_ids: Iterable[str],
    user_id: Optional[str] = None,
) -> Booking:
    """
    Book ``seat_ids`` for ``show_id`` in one indivisible step.

    Seats go straight from AVAILABLE (or expired PENDING) to BOOKED; there is
    no intermediate state visible to other transactions.

    Raises:
        SeatsLocked: another transaction holds a row lock on one of the seats.
        InvalidSeats: a seat id is not a seat of this show, or the set is empty.
        SeatsUnavailable: a seat is already booked or validly held.
        ShowNotFound: unknown show.
    """
    seat_ids = normalize_seat_ids(seat_ids)

    with unit_of_work(db):
        inventory.get_show(db, show_id)
        acquire_seats(db, show_id, seat_ids, SeatStatus.BOOKED)
        inventory.adjust_available_seats(db, show_id, -len(seat_ids))
        booking = _new_booking(show_id, seat_ids, BookingStatus.CONFIRMED, user_id=user_id)
        db.add(booking)
        db.flush()
        booking = inventory.get_booking(db, booking.id)

    logger.info("Booking %s confirmed: %d seat(s) on show %s", booking.id, len(seat_ids), show_id)
    return booking


def get_booking(db: Session, booking_id: str) -> Booking:
    return inventory.get_booking(db, booking_id)


# ---------------------------------------------------------------------------
# Deferred mode
# ---------------------------------------------------------------------------


def hold(
    db: Session,
    show_id: str,
    seat_ids: Iterable[str],
    ttl_seconds: Optional[int] = None,
) -> SeatHold:
    """Soft-hold seats as PENDING. Creates no booking."""
    return hold_seats(db, show_id, seat_ids, ttl_seconds=ttl_seconds)


def release(
    db: Session,
    show_id: str,
    seat_ids: Iterable[str],
    hold_token: Optional[str] = None,
) -> List[str]:
    return release_seats(db, show_id, seat_ids, hold_token=hold_token)


def create_pending_booking(
    db: Session,
    show_id: str,
    seat_ids: Iterable[str],
    user_id: Optional[str] = None,
    hold_token: Optional[str] = None,
    ttl_seconds: Optional[int] = None,
) -> Booking:
    """
    Insert a PENDING booking with a deadline.

    The seats are not locked here: linking this booking to a hold is up to the
    caller, through the ``hold_token`` returned by ``hold``. A booking without
    a token can only be failed, never confirmed.
    """
    seat_ids = normalize_seat_ids(seat_ids)
    ttl_seconds = resolve_ttl(ttl_seconds, settings.PENDING_BOOKING_SECONDS)

    with unit_of_work(db):
        inventory.get_show(db, show_id)
        foreign = inventory.find_foreign_seats(db, show_id, seat_ids)
        if foreign:
            raise InvalidSeats()
        booking = _new_booking(
            show_id,
            seat_ids,
            BookingStatus.PENDING,
            user_id=user_id,
            hold_token=hold_token,
            expires_at=expires_in(ttl_seconds),
        )
        db.add(booking)
        db.flush()
        booking = inventory.get_booking(db, booking.id)

    logger.info("Pending booking %s created for show %s", booking.id, show_id)
    return booking


def reserve(
    db: Session,
    show_id: str,
    seat_ids: Iterable[str],
    user_id: Optional[str] = None,
    ttl_seconds: Optional[int] = None,
) -> Booking:
    """Hold seats and insert the matching PENDING booking in one transaction."""
    seat_ids = normalize_seat_ids(seat_ids)
    ttl_seconds = resolve_ttl(ttl_seconds, settings.SEAT_HOLD_SECONDS)

    now = utcnow()
    locked_until = expires_in(ttl_seconds, now)
    token = str(uuid.uuid4())

    with unit_of_work(db):
        inventory.get_show(db, show_id)
        acquire_seats(
            db,
            show_id,
            seat_ids,
            SeatStatus.PENDING,
            locked_until=locked_until,
            lock_token=token,
            now=now,
        )
        booking = _new_booking(
            show_id,
            seat_ids,
            BookingStatus.PENDING,
            user_id=user_id,
            hold_token=token,
            expires_at=locked_until,
        )
        db.add(booking)
        db.flush()
        booking = inventory.get_booking(db, booking.id)

    logger.info("Reserved %d seat(s) on show %s as booking %s", len(seat_ids), show_id, booking.id)
    return booking


def confirm_booking(db: Session, booking_id: str) -> Booking:
    """
    Move a PENDING booking and its held seats to CONFIRMED / BOOKED.

    Raises ``HoldExpired`` when the booking deadline or any seat hold has
    lapsed, when a seat is no longer held under the booking's token, or when
    the booking was never linked to a hold.
    """
    now = utcnow()

    with unit_of_work(db):
        booking = _lock_pending_booking(db, booking_id)
        expires_at = as_utc(booking.expires_at)
        if expires_at is not None and expires_at <= now:
            raise HoldExpired("The booking deadline has passed")
        if booking.hold_token is None:
            raise HoldExpired("Booking is not linked to a seat hold")

        seat_ids = booking.seat_ids
        seats = lock_seat_rows(db, booking.show_id, seat_ids)
        if not all(is_held(seat, now, booking.hold_token) for seat in seats):
            raise HoldExpired()

        for seat in seats:
            seat.status = SeatStatus.BOOKED
            seat.locked_until = None
            seat.lock_token = None
        inventory.adjust_available_seats(db, booking.show_id, -len(seats))
        booking.status = BookingStatus.CONFIRMED
        db.flush()
        booking = inventory.get_booking(db, booking_id)

    logger.info("Booking %s confirmed from hold", booking.id)
    return booking


def fail_booking(db: Session, booking_id: str) -> Booking:
    """
    Release the booking's held seats and mark it FAILED.

    Without a hold token only lapsed holds are released; a live hold belongs
    to someone else.
    """
    with unit_of_work(db):
        booking = _lock_pending_booking(db, booking_id)
        released = release_locked_seats(
            db,
            booking.show_id,
            booking.seat_ids,
            hold_token=booking.hold_token,
            keep_live_holds=booking.hold_token is None,
        )
        booking.status = BookingStatus.FAILED
        db.flush()
        booking = inventory.get_booking(db, booking_id)

    logger.info("Booking %s failed, released %d seat(s)", booking.id, len(released))
    return booking
