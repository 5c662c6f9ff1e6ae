import os
import tempfile
from datetime import timedelta
from pathlib import Path

# Configure a throwaway SQLite database before the package reads its settings
_db_dir = tempfile.mkdtemp(prefix="seatlock-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_db_dir) / 'seatlock_test.db'}"
os.environ["REAPER_ENABLED"] = "false"
os.environ["SQLITE_LOCK_TIMEOUT"] = "0"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import seatlock.db.base  # noqa: E402, F401
from seatlock.db.session import Base, SessionLocal, engine  # noqa: E402
from seatlock.main import app  # noqa: E402
from seatlock.services import inventory  # noqa: E402
from seatlock.utils.clock import utcnow  # noqa: E402


@pytest.fixture
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(tables):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(tables):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_show(tables):
    """Create a show in its own session; returns (show_id, seat ids in seat-number order)."""

    def _make(total_seats=3, name="Evening Show", starts_in=timedelta(days=1)):
        session = SessionLocal()
        try:
            show = inventory.create_show(session, name, utcnow() + starts_in, total_seats)
            return show.id, [seat.id for seat in inventory.get_seats(session, show.id)]
        finally:
            session.close()

    return _make
