import asyncio
import logging

from fastapi import FastAPI
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware

from seatlock.core.config import settings
from seatlock.db.init_db import init_db
from seatlock.db.session import SessionLocal
from seatlock.api.errors import register_exception_handlers
from seatlock.api.v1.router import api_router
from seatlock.services.reaper import run_reaper_loop

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Ensure DB exists and create tables
    init_db()

    reaper_task = None
    if settings.REAPER_ENABLED:
        reaper_task = asyncio.create_task(
            run_reaper_loop(SessionLocal, settings.REAPER_INTERVAL_SECONDS)
        )
        logger.info("Lease reaper running every %ss.", settings.REAPER_INTERVAL_SECONDS)
    yield

    # Shutdown: cancel background task
    if reaper_task is not None:
        reaper_task.cancel()
        try:
            await reaper_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
def read_root():
    return {"Hello": "Seatlock"}
