from sqlalchemy import inspect
from sqlalchemy.orm import configure_mappers

from seatlock.db.session import Base, engine
from seatlock.models import Booking, BookingSeat, Seat, Show


def test_orm_mappings_are_valid():
    configure_mappers()
    assert Show.seats.property.mapper.class_ is Seat
    assert Booking.seats.property.mapper.class_ is BookingSeat


def test_all_tables_are_registered():
    assert {"shows", "seats", "bookings", "booking_seats"} <= set(Base.metadata.tables)


def test_tables_are_created(tables):
    names = set(inspect(engine).get_table_names())
    assert {"shows", "seats", "bookings", "booking_seats"} <= names


def test_seat_number_is_unique_per_show():
    constraints = {c.name for c in Seat.__table__.constraints}
    assert "uq_seats_show_seat_number" in constraints
