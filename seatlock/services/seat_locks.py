"""
Seat lock manager.

One primitive, ``acquire_seats``, takes exclusive row locks on a seat set
with a non-waiting policy, re-validates every seat, and moves the whole set
to a target status: ``PENDING`` with an expiry (a hold) or straight to
``BOOKED``. It never commits; the reservation engine composes it inside its
own transactions. ``hold_seats`` and ``release_seats`` are the standalone,
self-committing forms.

A PENDING seat whose ``locked_until`` has passed counts as free even before
the reaper resets it.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from seatlock.core.config import settings
from seatlock.core.exceptions import InvalidSeats, SeatsUnavailable
from seatlock.db.unit_of_work import unit_of_work
from seatlock.models.seat import Seat, SeatStatus
from seatlock.utils.clock import as_utc, expires_in, utcnow

logger = logging.getLogger(__name__)


@dataclass
class SeatHold:
    show_id: str
    seat_ids: List[str]
    locked_until: datetime
    hold_token: str
    ttl_seconds: int


def normalize_seat_ids(seat_ids: Iterable[str]) -> List[str]:
    """Validate a requested seat set, keeping the caller's order."""
    seat_ids = list(seat_ids)
    if not seat_ids:
        raise InvalidSeats("Select at least one seat")
    if len(set(seat_ids)) != len(seat_ids):
        raise InvalidSeats("Seat selection contains duplicates")
    if len(seat_ids) > settings.MAX_SEATS_PER_BOOKING:
        raise InvalidSeats(f"At most {settings.MAX_SEATS_PER_BOOKING} seats can be booked at once")
    return seat_ids


def resolve_ttl(ttl_seconds: Optional[int], default: int) -> int:
    """Apply the default TTL and bound it to 1..MAX_HOLD_SECONDS."""
    if ttl_seconds is None:
        ttl_seconds = default
    if not 0 < ttl_seconds <= settings.MAX_HOLD_SECONDS:
        raise InvalidSeats(f"Hold duration must be between 1 and {settings.MAX_HOLD_SECONDS} seconds")
    return ttl_seconds


def is_acquirable(seat: Seat, now: datetime) -> bool:
    if seat.status == SeatStatus.AVAILABLE:
        return True
    if seat.status == SeatStatus.PENDING:
        locked_until = as_utc(seat.locked_until)
        return locked_until is None or locked_until < now
    return False


def is_held(seat: Seat, now: datetime, hold_token: Optional[str] = None) -> bool:
    """True while ``seat`` is under an unexpired hold (under ``hold_token`` when given)."""
    if seat.status != SeatStatus.PENDING:
        return False
    locked_until = as_utc(seat.locked_until)
    if locked_until is None or locked_until <= now:
        return False
    return hold_token is None or seat.lock_token == hold_token


def lock_seat_rows(db: Session, show_id: str, seat_ids: List[str]) -> List[Seat]:
    """
    SELECT ... FOR UPDATE NOWAIT on the requested seats of ``show_id``.

    Rows are locked in primary-key order. A row already locked by another
    transaction raises a lock error immediately, which ``unit_of_work``
    turns into ``SeatsLocked``. Ids that are not seats of this show raise
    ``InvalidSeats``.
    """
    seats = (
        db.query(Seat)
        .filter(Seat.show_id == show_id, Seat.id.in_(seat_ids))
        .order_by(Seat.id)
        .populate_existing()
        .with_for_update(nowait=True)
        .all()
    )
    if len(seats) != len(seat_ids):
        raise InvalidSeats()
    by_id = {seat.id: seat for seat in seats}
    return [by_id[seat_id] for seat_id in seat_ids]


def acquire_seats(
    db: Session,
    show_id: str,
    seat_ids: List[str],
    target: SeatStatus,
    locked_until: Optional[datetime] = None,
    lock_token: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[Seat]:
    """
    Lock, re-validate and transition ``seat_ids`` to ``target``.

    Raises ``SeatsUnavailable`` if any seat is BOOKED or validly held. The
    caller's transaction must be rolled back on any error.
    """
    if target == SeatStatus.PENDING and locked_until is None:
        raise ValueError("A PENDING hold needs an expiry")
    if target == SeatStatus.AVAILABLE:
        raise ValueError("Use release_seats to free seats")

    now = now or utcnow()
    seats = lock_seat_rows(db, show_id, seat_ids)

    unavailable = [seat.id for seat in seats if not is_acquirable(seat, now)]
    if unavailable:
        raise SeatsUnavailable(unavailable)

    for seat in seats:
        seat.status = target
        if target == SeatStatus.PENDING:
            seat.locked_until = locked_until
            seat.lock_token = lock_token
        else:
            seat.locked_until = None
            seat.lock_token = None

    db.flush()
    return seats


def release_locked_seats(
    db: Session,
    show_id: str,
    seat_ids: List[str],
    hold_token: Optional[str] = None,
    keep_live_holds: bool = False,
) -> List[str]:
    """
    Return PENDING seats to AVAILABLE inside the caller's transaction.

    BOOKED and AVAILABLE seats are left untouched. With ``hold_token`` only
    seats still held under that token are released. With ``keep_live_holds``
    only seats whose hold already lapsed are released.
    """
    now = utcnow()
    seats = lock_seat_rows(db, show_id, seat_ids)
    released = []
    for seat in seats:
        if seat.status != SeatStatus.PENDING:
            continue
        if hold_token is not None and seat.lock_token != hold_token:
            continue
        if keep_live_holds and is_held(seat, now):
            continue
        seat.status = SeatStatus.AVAILABLE
        seat.locked_until = None
        seat.lock_token = None
        released.append(seat.id)
    db.flush()
    return released


def hold_seats(
    db: Session,
    show_id: str,
    seat_ids: Iterable[str],
    ttl_seconds: Optional[int] = None,
) -> SeatHold:
    """Place an exclusive, time-bounded hold on ``seat_ids`` and commit it."""
    seat_ids = normalize_seat_ids(seat_ids)
    ttl_seconds = resolve_ttl(ttl_seconds, settings.SEAT_HOLD_SECONDS)

    now = utcnow()
    locked_until = expires_in(ttl_seconds, now)
    token = str(uuid.uuid4())

    with unit_of_work(db):
        acquire_seats(
            db,
            show_id,
            seat_ids,
            SeatStatus.PENDING,
            locked_until=locked_until,
            lock_token=token,
            now=now,
        )

    logger.info("Held %d seat(s) on show %s until %s", len(seat_ids), show_id, locked_until.isoformat())
    return SeatHold(
        show_id=show_id,
        seat_ids=seat_ids,
        locked_until=locked_until,
        hold_token=token,
        ttl_seconds=ttl_seconds,
    )


def release_seats(
    db: Session,
    show_id: str,
    seat_ids: Iterable[str],
    hold_token: Optional[str] = None,
) -> List[str]:
    """Release a hold and commit. Idempotent; returns the seats actually released."""
    seat_ids = normalize_seat_ids(seat_ids)
    with unit_of_work(db):
        released = release_locked_seats(db, show_id, seat_ids, hold_token=hold_token)
    if released:
        logger.info("Released %d seat(s) on show %s", len(released), show_id)
    return released
