import enum
from sqlalchemy import Column, String, DateTime, func, Integer, ForeignKey, Index, Enum as SAEnum
from sqlalchemy.orm import relationship
from seatlock.db.session import Base
from seatlock.models.show import _new_id


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=_new_id)
    show_id = Column(String(36), ForeignKey("shows.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(255), nullable=True, index=True)
    status = Column(
        SAEnum(BookingStatus, native_enum=False, name="booking_status"),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    # Lease this booking expects to confirm; NULL when the caller links hold and booking itself
    hold_token = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    show = relationship("Show", back_populates="bookings")
    seats = relationship(
        "BookingSeat",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingSeat.position",
    )

    __table_args__ = (
        Index("ix_bookings_status_expires_at", "status", "expires_at"),
    )

    @property
    def seat_ids(self):
        return [bs.seat_id for bs in self.seats]


class BookingSeat(Base):
    __tablename__ = "booking_seats"

    id = Column(String(36), primary_key=True, default=_new_id)
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_id = Column(String(36), ForeignKey("seats.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)

    booking = relationship("Booking", back_populates="seats")
    seat = relationship("Seat")
