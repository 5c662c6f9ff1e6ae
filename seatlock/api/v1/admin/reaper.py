from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from seatlock.db.session import get_db
from seatlock.schemas.common import SweepResponse
from seatlock.services.reaper import sweep

router = APIRouter(prefix="/admin/reaper", tags=["Admin - Lease Reaper"])


@router.post("/sweep", response_model=SweepResponse)
def run_sweep(db: Session = Depends(get_db)):
    """
    Run one lease-reaper sweep now instead of waiting for the background loop.

    1. Expired seat holds go back to AVAILABLE.
    2. PENDING bookings past their deadline are failed and their seats released.
    """
    result = sweep(db)
    return SweepResponse(
        seats_reclaimed=result.seats_reclaimed,
        bookings_failed=result.bookings_failed,
    )
