"""
Check-in persistence.

At most one check-in per user per day. A repeat check-in overwrites the note
and timestamp in place (ON CONFLICT DO UPDATE), so concurrent writers resolve
last-write-wins inside SQLite.
"""
from typing import Optional
import logging

from sqlalchemy import func, select, union_all
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from core import dates
from models import CheckIn, ResearchEntry

logger = logging.getLogger(__name__)


def upsert_checkin(db: Session, user_id: int, day: str, note: Optional[str]) -> CheckIn:
    now = dates.now_timestamp()
    stmt = insert(CheckIn).values(user_id=user_id, day=day, note=note, created_at=now)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "day"],
        set_={"note": stmt.excluded.note, "created_at": stmt.excluded.created_at},
    )
    db.execute(stmt)
    # The ORM identity map may hold a stale copy from an earlier read
    db.expire_all()
    checkin = get_checkin(db, user_id, day)
    logger.debug(f"Check-in stored for user {user_id} on {day}")
    return checkin


def get_checkin(db: Session, user_id: int, day: str) -> Optional[CheckIn]:
    return db.query(CheckIn).filter(
        CheckIn.user_id == user_id,
        CheckIn.day == day,
    ).first()


def get_last_activity(db: Session, user_id: int) -> Optional[str]:
    """Newest created_at across check-ins and research entries, or None."""
    activity = union_all(
        select(CheckIn.created_at.label("created_at")).where(CheckIn.user_id == user_id),
        select(ResearchEntry.created_at.label("created_at")).where(ResearchEntry.user_id == user_id),
    ).subquery()
    return db.execute(
        select(func.max(activity.c.created_at))
    ).scalar()
