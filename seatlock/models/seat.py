import enum
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Index, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from seatlock.db.session import Base
from seatlock.models.show import _new_id


class SeatStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    PENDING = "PENDING"
    BOOKED = "BOOKED"


class Seat(Base):
    __tablename__ = "seats"

    id = Column(String(36), primary_key=True, default=_new_id)
    show_id = Column(String(36), ForeignKey("shows.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_number = Column(Integer, nullable=False)
    status = Column(
        SAEnum(SeatStatus, native_enum=False, name="seat_status"),
        nullable=False,
        default=SeatStatus.AVAILABLE,
    )
    # Both set only while PENDING
    locked_until = Column(DateTime(timezone=True), nullable=True)
    lock_token = Column(String(36), nullable=True)

    show = relationship("Show", back_populates="seats")

    __table_args__ = (
        UniqueConstraint("show_id", "seat_number", name="uq_seats_show_seat_number"),
        Index("ix_seats_status_locked_until", "status", "locked_until"),
    )
