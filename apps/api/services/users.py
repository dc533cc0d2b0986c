"""
User lookups and seeding.

The user set is closed: names come from settings.TRACKED_USERS and are seeded
once at startup. Users are never created any other way, never renamed and
never deleted.
"""
from typing import List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from core import dates
from core.config import settings
from models import User

logger = logging.getLogger(__name__)


def seed_users(db: Session, names: Optional[List[str]] = None) -> None:
    """Insert the tracked users if missing (INSERT OR IGNORE)."""
    now = dates.now_timestamp()
    for name in names or settings.tracked_user_names:
        stmt = insert(User).values(name=name, created_at=now).on_conflict_do_nothing(index_elements=["name"])
        db.execute(stmt)
    db.flush()
    logger.debug("Seeded tracked users")


def get_user_by_name(db: Session, name: Optional[str]) -> Optional[User]:
    """Case-insensitive lookup; surrounding whitespace is ignored."""
    if not name or not name.strip():
        return None
    return (
        db.query(User)
        .filter(func.lower(User.name) == name.strip().lower())
        .first()
    )


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.name.asc()).all()
