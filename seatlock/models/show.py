import uuid
from sqlalchemy import Column, String, DateTime, Integer, func
from sqlalchemy.orm import relationship
from seatlock.db.session import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Show(Base):
    __tablename__ = "shows"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    total_seats = Column(Integer, nullable=False)
    # Denormalised: total_seats minus BOOKED seats, kept in step by every booking transaction
    available_seats = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    seats = relationship(
        "Seat",
        back_populates="show",
        cascade="all, delete-orphan",
        order_by="Seat.seat_number",
    )
    bookings = relationship("Booking", back_populates="show", cascade="all, delete-orphan")
