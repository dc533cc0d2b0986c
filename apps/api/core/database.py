"""
Database connection management.

One SQLite file holds all state. The engine runs in WAL mode and relies on
SQLite's own locking to serialize writers across requests.
"""
from pathlib import Path

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker, Session
from core.config import settings
import logging

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL


def _ensure_sqlite_directory(url: str) -> None:
    database = make_url(url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


if make_url(DATABASE_URL).get_backend_name() != "sqlite":
    raise RuntimeError(f"Only SQLite is supported, got DATABASE_URL={DATABASE_URL!r}")

_ensure_sqlite_directory(DATABASE_URL)

engine = create_engine(
    DATABASE_URL,
    # get_db is a sync generator run in the threadpool while async endpoints
    # use the session on the event loop, so a connection crosses threads.
    connect_args={"check_same_thread": False},
    echo=settings.DEBUG,  # Log SQL queries in debug mode
)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # Prevent lazy loading issues
)

Base = declarative_base()


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Set connection-level settings."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    logger.debug("New database connection established")


def get_db() -> Session:
    """
    Dependency for FastAPI to get database session.

    Commits when the request handler returns, rolls back and re-raises
    on any error. There is no retry: each operation succeeds or fails once.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        # Only log actual database errors, not flow-control exceptions
        from core.exceptions import AppException
        if not isinstance(e, AppException):
            logger.error(f"Database transaction error: {e}")
        raise
    finally:
        db.close()


def init_db() -> None:
    """
    Create the schema and seed the tracked users.

    Safe to call on every startup: tables are created only if missing and
    seeding is insert-or-ignore.
    """
    import models  # noqa: F401  registers tables on Base.metadata
    from services.users import seed_users

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_users(db)
        db.commit()
    finally:
        db.close()
    logger.info("Database ready at %s", DATABASE_URL)


def check_db_connection() -> bool:
    """
    Check if database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
