from typing import List
from pydantic import BaseModel, Field
from datetime import datetime

from seatlock.schemas.seat import Seat


class ShowCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    start_time: datetime
    # Upper bound is enforced against MAX_SEATS_PER_SHOW by the inventory layer
    total_seats: int = Field(..., ge=1)


class Show(BaseModel):
    id: str
    name: str
    start_time: datetime
    total_seats: int
    available_seats: int
    created_at: datetime

    class Config:
        from_attributes = True


# GET /shows/{id}
class ShowWithSeats(Show):
    seats: List[Seat] = []
