from datetime import datetime
from typing import List
from pydantic import BaseModel


# Error responses: body of every ReservationError
class ErrorResponse(BaseModel):
    error: str
    message: str


class SeatsUnavailableError(ErrorResponse):
    unavailable_seat_ids: List[str]


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


# Admin: lease reaper
class SweepResponse(BaseModel):
    seats_reclaimed: int
    bookings_failed: int
