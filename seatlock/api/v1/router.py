from fastapi import APIRouter

from seatlock.schemas.common import HealthResponse
from seatlock.utils.clock import utcnow

# Public — shows, seat holds
from seatlock.api.v1.public.shows import router as shows_router

# Public — bookings
from seatlock.api.v1.public.bookings import router as bookings_router

# Admin
from seatlock.api.v1.admin.reaper import router as reaper_router

api_router = APIRouter()

# --- Public ---
api_router.include_router(shows_router)
api_router.include_router(bookings_router)

# --- Admin ---
api_router.include_router(reaper_router)


@api_router.get("/health", response_model=HealthResponse, tags=["Health"])
def health():
    return HealthResponse(status="ok", timestamp=utcnow())
