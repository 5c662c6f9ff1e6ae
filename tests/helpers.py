from datetime import timedelta

from seatlock.db.session import SessionLocal
from seatlock.models.booking import Booking
from seatlock.models.seat import Seat, SeatStatus
from seatlock.models.show import Show
from seatlock.services import inventory
from seatlock.utils.clock import utcnow


def seat_state(show_id):
    """Fresh read of (show, {seat_id: seat}) outside any test session."""
    session = SessionLocal()
    try:
        show = session.query(Show).filter(Show.id == show_id).one()
        seats = {seat.id: seat for seat in inventory.get_seats(session, show_id)}
        session.expunge_all()
        return show, seats
    finally:
        session.close()


def assert_counter_consistent(show_id):
    show, seats = seat_state(show_id)
    booked = sum(1 for seat in seats.values() if seat.status == SeatStatus.BOOKED)
    assert show.available_seats == show.total_seats - booked


def expire_seats(seat_ids, ago=timedelta(seconds=5)):
    """Move the hold expiry of ``seat_ids`` into the past."""
    session = SessionLocal()
    try:
        session.query(Seat).filter(Seat.id.in_(seat_ids)).update(
            {Seat.locked_until: utcnow() - ago}, synchronize_session=False
        )
        session.commit()
    finally:
        session.close()


def expire_booking(booking_id, ago=timedelta(seconds=5)):
    session = SessionLocal()
    try:
        session.query(Booking).filter(Booking.id == booking_id).update(
            {Booking.expires_at: utcnow() - ago}, synchronize_session=False
        )
        session.commit()
    finally:
        session.close()
