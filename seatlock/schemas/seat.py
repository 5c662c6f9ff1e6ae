
from typing import Annotated, Optional, List
from pydantic import BaseModel, Field
from datetime import datetime

from seatlock.models.seat import SeatStatus


class Seat(BaseModel):
    id: str
    show_id: str
    seat_number: int
    status: SeatStatus
    locked_until: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- Seat holds (deferred mode) ---

SeatIdList = Annotated[List[Annotated[str, Field(min_length=1)]], Field(min_length=1)]


class HoldRequest(BaseModel):
    seat_ids: SeatIdList
    ttl_seconds: Optional[int] = Field(None, ge=1)


class HoldResponse(BaseModel):
    show_id: str
    seat_ids: List[str]
    locked_until: datetime
    hold_token: str
    ttl_seconds: int

    class Config:
        from_attributes = True


class HoldReleaseRequest(BaseModel):
    seat_ids: SeatIdList
    hold_token: Optional[str] = None


class HoldReleaseResponse(BaseModel):
    released_seats: List[str]
