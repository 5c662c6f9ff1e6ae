from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from seatlock.db.session import get_db
from seatlock.schemas.show import Show as ShowSchema, ShowCreate, ShowWithSeats
from seatlock.schemas.seat import (
    HoldRequest,
    HoldResponse,
    HoldReleaseRequest,
    HoldReleaseResponse,
)
from seatlock.services import inventory, reservations

router = APIRouter(prefix="/shows", tags=["Shows"])


# ---------------------------------------------------------------------------
# Shows: plain inventory passthroughs
# ---------------------------------------------------------------------------


@router.get("/", response_model=List[ShowSchema])
def list_shows(db: Session = Depends(get_db)):
    """Return all shows ordered by start time."""
    return inventory.list_shows(db)


@router.get("/{show_id}", response_model=ShowWithSeats)
def get_show(show_id: str, db: Session = Depends(get_db)):
    """Return a show with its seats ordered by seat number."""
    return inventory.get_show_with_seats(db, show_id)


@router.post("/", response_model=ShowSchema, status_code=status.HTTP_201_CREATED)
def create_show(data: ShowCreate, db: Session = Depends(get_db)):
    return inventory.create_show(db, data.name, data.start_time, data.total_seats)


@router.delete("/{show_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_show(show_id: str, db: Session = Depends(get_db)):
    inventory.delete_show(db, show_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Seat holds (deferred mode)
# ---------------------------------------------------------------------------


@router.post("/{show_id}/holds", response_model=HoldResponse, status_code=status.HTTP_201_CREATED)
def hold_seats(show_id: str, body: HoldRequest, db: Session = Depends(get_db)):
    """
    Hold seats as PENDING for `ttl_seconds` (server default when omitted).
    Keep the returned `hold_token` to link a pending booking to this hold.
    """
    inventory.get_show(db, show_id)
    return reservations.hold(db, show_id, body.seat_ids, ttl_seconds=body.ttl_seconds)


@router.delete("/{show_id}/holds", response_model=HoldReleaseResponse)
def release_seats(show_id: str, body: HoldReleaseRequest, db: Session = Depends(get_db)):
    """Release held seats. Seats that are already free or booked are left as they are."""
    released = reservations.release(db, show_id, body.seat_ids, hold_token=body.hold_token)
    return HoldReleaseResponse(released_seats=released)
