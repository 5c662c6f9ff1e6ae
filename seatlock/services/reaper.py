"""
Lease reaper.

Reclaims seats whose hold expired without confirmation and fails pending
bookings past their deadline. Per-item failures are logged and left for the
next sweep; they never abort the rest of the batch.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seatlock.core.exceptions import ReservationError, SeatsLocked
from seatlock.db.unit_of_work import unit_of_work
from seatlock.models.seat import SeatStatus
from seatlock.services import inventory
from seatlock.services.reservations import fail_booking
from seatlock.utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    seats_reclaimed: int = 0
    bookings_failed: int = 0


def reclaim_expired_holds(db: Session, now: Optional[datetime] = None) -> int:
    """
    Reset every PENDING seat whose ``locked_until`` has passed to AVAILABLE.

    Rows locked by an in-flight transaction are skipped, not waited on; they
    are picked up by a later sweep if still expired. Returns the number of
    seats reclaimed.
    """
    now = now or utcnow()
    try:
        with unit_of_work(db):
            seats = (
                inventory.expired_hold_query(db, now)
                .populate_existing()
                .with_for_update(skip_locked=True)
                .all()
            )
            for seat in seats:
                seat.status = SeatStatus.AVAILABLE
                seat.locked_until = None
                seat.lock_token = None
            count = len(seats)
    except SeatsLocked:
        logger.warning("Seat reclaim skipped: store is locked by another transaction.")
        return 0
    return count


def fail_overdue_bookings(db: Session, now: Optional[datetime] = None) -> int:
    """Fail each PENDING booking past its deadline. Returns how many were failed."""
    now = now or utcnow()
    try:
        with unit_of_work(db):
            booking_ids = inventory.overdue_pending_booking_ids(db, now)
    except SeatsLocked:
        logger.warning("Overdue booking scan skipped: store is locked by another transaction.")
        return 0

    failed = 0
    for booking_id in booking_ids:
        try:
            fail_booking(db, booking_id)
            failed += 1
        except ReservationError as exc:
            # Confirmed or failed concurrently, or its rows are busy: retry next sweep
            logger.warning("Could not fail overdue booking %s: %s", booking_id, exc.message)
        except SQLAlchemyError:
            logger.exception("Error failing overdue booking %s.", booking_id)
    return failed


def sweep(db: Session) -> SweepResult:
    now = utcnow()
    result = SweepResult(
        seats_reclaimed=reclaim_expired_holds(db, now),
        bookings_failed=fail_overdue_bookings(db, now),
    )
    if result.seats_reclaimed or result.bookings_failed:
        logger.info(
            "Reaper reclaimed %d seat(s), failed %d booking(s).",
            result.seats_reclaimed,
            result.bookings_failed,
        )
    return result


async def run_reaper_loop(session_factory: Callable[[], Session], interval: float) -> None:
    """Background task: sweep expired leases every ``interval`` seconds."""
    while True:
        try:
            db = session_factory()
            try:
                sweep(db)
            finally:
                db.close()
        except Exception:
            logger.exception("Error during lease reaper sweep.")
        await asyncio.sleep(interval)
