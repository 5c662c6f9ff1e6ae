from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, declarative_base
from seatlock.core.config import settings

# Postgres error code for FOR UPDATE NOWAIT hitting a row locked elsewhere
LOCK_NOT_AVAILABLE = "55P03"

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False, "timeout": settings.SQLITE_LOCK_TIMEOUT}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

if engine.dialect.name == "sqlite":
    # SQLite has no row locks. With an explicit BEGIN and WAL, a transaction
    # whose snapshot went stale, or that meets another writer, fails with
    # "database is locked" on its first write instead of overwriting.

    @event.listens_for(engine, "connect")
    def _sqlite_on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        # Readers must not make a committing writer fail
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _sqlite_on_begin(conn):
        conn.exec_driver_sql("BEGIN")


# Results returned by the engine stay readable after its transaction commits
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_lock_contention(exc: OperationalError) -> bool:
    """True when the error means another transaction holds the lock we asked for."""
    if getattr(exc.orig, "pgcode", None) == LOCK_NOT_AVAILABLE:
        return True
    return "database is locked" in str(exc.orig)
