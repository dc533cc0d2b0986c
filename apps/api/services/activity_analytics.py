"""
Activity Analytics Service

Streaks, completion ratios and the presence heatmap, computed live from
check-in and research rows. Nothing here writes; nothing is cached.

Every function accepts an optional ``today`` (canonical day string) so the
window can be pinned. When omitted, the calendar clock decides.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
import logging

from sqlalchemy import func, select, union_all
from sqlalchemy.orm import Session

from core import dates
from models import CheckIn, ResearchEntry, User
from services.checkins import get_checkin, get_last_activity
from services.research_entries import ResearchItem, get_recent_research
from services.users import list_users

logger = logging.getLogger(__name__)


@dataclass
class Completion:
    """Check-in coverage of a trailing window"""
    total_days: int
    completed_days: int
    percent: int


@dataclass
class PresenceDay:
    """One heatmap cell: check-ins plus research entries on a day"""
    day: str
    count: int


@dataclass
class UserStats:
    user: User
    has_today: bool
    last_activity: Optional[str]
    streak: int
    completion7: Completion
    completion30: Completion
    completion90: Completion
    heatmap: List[PresenceDay] = field(default_factory=list)


def _today(today: Optional[str]) -> str:
    return today or dates.current_day()


def _window_start(window_days: int, today: str) -> str:
    return dates.shift_day(today, -(window_days - 1))


def round_percent(completed: int, total: int) -> int:
    """
    Nearest whole percent of completed/total, ties rounded up.

    Computed in exact decimal arithmetic so 1/8 -> 12.5 -> 13 regardless of
    float representation.
    """
    ratio = Decimal(completed * 100) / Decimal(total)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compute_streak(db: Session, user_id: int, today: Optional[str] = None) -> int:
    """
    Consecutive check-in days ending today.

    A missing check-in today means streak 0, even if yesterday was checked in.
    """
    checkin_days = {
        day for (day,) in db.query(CheckIn.day).filter(CheckIn.user_id == user_id).all()
    }

    streak = 0
    cursor = _today(today)
    while cursor in checkin_days:
        streak += 1
        cursor = dates.shift_day(cursor, -1)
    return streak


def compute_completion(
    db: Session,
    user_id: int,
    window_days: int,
    today: Optional[str] = None,
) -> Completion:
    """
    Share of the trailing ``window_days`` (today inclusive) with a check-in.

    Non-positive windows return (0, 0, 0) without touching the database.
    The window has an inclusive lower bound and no upper bound: a row dated
    after today still counts.
    """
    if window_days <= 0:
        return Completion(total_days=0, completed_days=0, percent=0)

    start_day = _window_start(window_days, _today(today))
    completed_days = db.query(func.count(func.distinct(CheckIn.day))).filter(
        CheckIn.user_id == user_id,
        CheckIn.day >= start_day,
    ).scalar() or 0

    return Completion(
        total_days=window_days,
        completed_days=completed_days,
        percent=round_percent(completed_days, window_days),
    )


def build_presence_map(
    db: Session,
    user_id: int,
    days_back: int,
    today: Optional[str] = None,
) -> List[PresenceDay]:
    """
    Per-day activity counts over the trailing window, oldest first.

    Always returns exactly ``days_back`` entries; quiet days are 0. Rows
    outside the window are ignored.
    """
    if days_back <= 0:
        return []

    end_day = _today(today)
    window = [dates.shift_day(end_day, -offset) for offset in range(days_back - 1, -1, -1)]
    counts = dict.fromkeys(window, 0)
    start_day = window[0]

    activity = union_all(
        select(CheckIn.day.label("day")).where(CheckIn.user_id == user_id, CheckIn.day >= start_day),
        select(ResearchEntry.day.label("day")).where(ResearchEntry.user_id == user_id, ResearchEntry.day >= start_day),
    ).subquery()
    rows = db.execute(
        select(activity.c.day, func.count()).group_by(activity.c.day)
    ).all()

    for day, count in rows:
        if day in counts:
            counts[day] = int(count)

    return [PresenceDay(day=day, count=count) for day, count in counts.items()]


def build_recent_feed(
    db: Session,
    user_filter: Optional[str],
    window_days: Optional[int],
    limit: int,
) -> List[ResearchItem]:
    """Newest research across users; ``"All"`` means no owner filter."""
    return get_recent_research(db, limit=limit, user_name=user_filter, days=window_days)


def build_user_stats(
    db: Session,
    user: User,
    heatmap_days: int = 90,
    today: Optional[str] = None,
) -> UserStats:
    """Everything a dashboard card shows for one user."""
    today = _today(today)
    return UserStats(
        user=user,
        has_today=get_checkin(db, user.id, today) is not None,
        last_activity=get_last_activity(db, user.id),
        streak=compute_streak(db, user.id, today=today),
        completion7=compute_completion(db, user.id, 7, today=today),
        completion30=compute_completion(db, user.id, 30, today=today),
        completion90=compute_completion(db, user.id, 90, today=today),
        heatmap=build_presence_map(db, user.id, heatmap_days, today=today),
    )


def build_all_user_stats(db: Session, heatmap_days: int = 90) -> List[UserStats]:
    today = dates.current_day()
    return [build_user_stats(db, user, heatmap_days=heatmap_days, today=today) for user in list_users(db)]


def build_stats_payload(db: Session) -> dict:
    """Body of /api/stats: streak and completion figures for every user."""
    today = dates.current_day()
    data = []
    for user in list_users(db):
        data.append({
            "name": user.name,
            "streak": compute_streak(db, user.id, today=today),
            "completion7": compute_completion(db, user.id, 7, today=today),
            "completion30": compute_completion(db, user.id, 30, today=today),
            "completion90": compute_completion(db, user.id, 90, today=today),
        })
    logger.debug(f"Stats computed for {len(data)} users")
    return {"generated_at": dates.now_timestamp(), "data": data}
