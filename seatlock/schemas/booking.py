from typing import Optional, List
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

from seatlock.models.booking import BookingStatus
from seatlock.schemas.seat import SeatIdList


# Booking: Create (POST /bookings, POST /bookings/reserve)
class BookingCreate(BaseModel):
    show_id: str = Field(..., min_length=1)
    seat_ids: SeatIdList
    user_id: Optional[str] = None

    @field_validator("user_id", mode="before")
    @classmethod
    def parse_empty_str_to_none(cls, v):
        if v == "":
            return None
        return v


class ReserveCreate(BookingCreate):
    ttl_seconds: Optional[int] = Field(None, ge=1)


# Booking: pending, linked to a hold by the caller (POST /bookings/pending)
class PendingBookingCreate(BookingCreate):
    hold_token: Optional[str] = None


# Booking: Full response
class Booking(BaseModel):
    id: str
    show_id: str
    user_id: Optional[str] = None
    seat_ids: List[str]
    status: BookingStatus
    created_at: datetime
    expires_at: Optional[datetime] = None

    class Config:
        from_attributes = True
