import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from seatlock.core.exceptions import SeatsLocked
from seatlock.db.session import is_lock_contention

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run the enclosed block as one transaction on ``db``.

    Commits when the block finishes, rolls back on any exception. A database
    error caused by a row (or SQLite database) lock held elsewhere is re-raised
    as ``SeatsLocked`` so callers see contention, not a driver error.
    """
    try:
        yield db
        db.commit()
    except OperationalError as exc:
        db.rollback()
        if is_lock_contention(exc):
            logger.debug("Lock contention: %s", exc.orig)
            raise SeatsLocked() from exc
        raise
    except Exception:
        db.rollback()
        raise
