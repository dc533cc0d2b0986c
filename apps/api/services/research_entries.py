"""
Research entry persistence.

Update and delete repeat the ownership check in their WHERE clause, so a
mismatched owner touches zero rows even if a caller forgot the gate.
"""
from dataclasses import dataclass, field
from typing import List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from core import dates
from models import ResearchEntry, User
from services.research_input import ResearchPayload

logger = logging.getLogger(__name__)

ALL_USERS = "All"


@dataclass
class ResearchItem:
    """A research entry as the views consume it: owner name attached, links as a list."""
    id: int
    user_id: int
    user_name: Optional[str]
    day: str
    title: str
    summary: str
    tickers: str
    confidence: Optional[int]
    minutes_spent: Optional[int]
    created_at: str
    links: List[str] = field(default_factory=list)

    @property
    def ticker_list(self) -> List[str]:
        return [t for t in (self.tickers or "").split(",") if t]


def _to_item(entry: ResearchEntry, user_name: Optional[str] = None) -> ResearchItem:
    return ResearchItem(
        id=entry.id,
        user_id=entry.user_id,
        user_name=user_name,
        day=entry.day,
        title=entry.title,
        summary=entry.summary,
        tickers=entry.tickers or "",
        confidence=entry.confidence,
        minutes_spent=entry.minutes_spent,
        created_at=entry.created_at,
        links=list(entry.links or []),
    )


def create_research(db: Session, user_id: int, payload: ResearchPayload) -> ResearchEntry:
    entry = ResearchEntry(
        user_id=user_id,
        day=payload.day or dates.current_day(),
        title=payload.title,
        summary=payload.summary,
        tickers=payload.tickers,
        links=list(payload.links),
        confidence=payload.confidence,
        minutes_spent=payload.minutes_spent,
        created_at=dates.now_timestamp(),
    )
    db.add(entry)
    db.flush()
    db.refresh(entry)
    logger.info(f"Research entry {entry.id} created by user {user_id}")
    return entry


def update_research(db: Session, entry_id: int, user_id: int, payload: ResearchPayload) -> bool:
    """Edit title/summary/tickers/links/confidence/minutes. Returns False unless id and owner match."""
    changed = (
        db.query(ResearchEntry)
        .filter(ResearchEntry.id == entry_id, ResearchEntry.user_id == user_id)
        .update(
            {
                ResearchEntry.title: payload.title,
                ResearchEntry.summary: payload.summary,
                ResearchEntry.tickers: payload.tickers,
                ResearchEntry.links: list(payload.links),
                ResearchEntry.confidence: payload.confidence,
                ResearchEntry.minutes_spent: payload.minutes_spent,
            },
            synchronize_session="fetch",
        )
    )
    return changed > 0


def delete_research(db: Session, entry_id: int, user_id: int) -> bool:
    deleted = (
        db.query(ResearchEntry)
        .filter(ResearchEntry.id == entry_id, ResearchEntry.user_id == user_id)
        .delete(synchronize_session="fetch")
    )
    return deleted > 0


def get_research_by_id(db: Session, entry_id: int) -> Optional[ResearchEntry]:
    return db.query(ResearchEntry).filter(ResearchEntry.id == entry_id).first()


def get_research_for_user(db: Session, user_id: int, days: int) -> List[ResearchItem]:
    """Own entries dated within the trailing ``days`` window, newest first."""
    start_day = dates.day_range(days)[0]
    entries = (
        db.query(ResearchEntry)
        .filter(ResearchEntry.user_id == user_id, ResearchEntry.day >= start_day)
        .order_by(ResearchEntry.created_at.desc(), ResearchEntry.id.desc())
        .all()
    )
    return [_to_item(entry) for entry in entries]


def get_recent_research(
    db: Session,
    limit: int = 30,
    user_name: Optional[str] = None,
    days: Optional[int] = None,
) -> List[ResearchItem]:
    """
    Newest-first research feed across users.

    Args:
        limit: Maximum rows returned
        user_name: Owner name (case-insensitive); None or "All" for everyone
        days: Trailing day window on the entry's day; None or 0 for no window
    """
    query = db.query(ResearchEntry, User.name).join(User, ResearchEntry.user_id == User.id)

    if user_name and user_name != ALL_USERS:
        query = query.filter(func.lower(User.name) == user_name.strip().lower())
    if days and days > 0:
        start_day = dates.day_range(days)[0]
        query = query.filter(ResearchEntry.day >= start_day)

    rows = query.order_by(ResearchEntry.created_at.desc(), ResearchEntry.id.desc()).limit(limit).all()
    return [_to_item(entry, name) for entry, name in rows]
