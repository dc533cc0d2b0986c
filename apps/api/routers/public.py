"""
Public dashboards.

No login needed. Shows every user's streak, completion and heatmap, plus the
research feed with optional owner and day-range filters.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional

from core.auth import RequestContext, get_request_context
from core.config import settings
from core.database import get_db
from core.exceptions import NotFoundError
from core.templating import redirect, render_page
from services.activity_analytics import build_all_user_stats, build_recent_feed, build_user_stats
from services.research_entries import ALL_USERS
from services.users import get_user_by_name, list_users

router = APIRouter(tags=["public"])

RANGE_CHOICES = (7, 30, 90)
DEFAULT_RANGE = 30
PROFILE_FEED_DAYS = 90


def parse_range(raw: Optional[str]) -> int:
    """Accept only the offered ranges; anything else falls back to 30 days."""
    try:
        value = int(raw) if raw is not None else DEFAULT_RANGE
    except ValueError:
        return DEFAULT_RANGE
    return value if value in RANGE_CHOICES else DEFAULT_RANGE


@router.get("/")
async def root():
    return redirect("/public")


@router.get("/public")
async def public_dashboard(
    request: Request,
    user: Optional[str] = Query(None),
    range_param: Optional[str] = Query(None, alias="range"),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    filter_user = user or ALL_USERS
    range_days = parse_range(range_param)
    return render_page(
        request,
        ctx,
        "public.html",
        title="Public Dashboard",
        stats=build_all_user_stats(db, heatmap_days=settings.HEATMAP_DAYS),
        feed=build_recent_feed(db, filter_user, range_days, settings.FEED_LIMIT),
        users=list_users(db),
        filter_user=filter_user,
        range_days=range_days,
        range_choices=RANGE_CHOICES,
    )


@router.get("/u/{name}")
async def user_profile(
    request: Request,
    name: str,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    profile_user = get_user_by_name(db, name)
    if not profile_user:
        raise NotFoundError("User", name)

    return render_page(
        request,
        ctx,
        "user.html",
        title=f"{profile_user.name} Profile",
        stats=build_user_stats(db, profile_user, heatmap_days=settings.HEATMAP_DAYS),
        feed=build_recent_feed(db, profile_user.name, PROFILE_FEED_DAYS, settings.FEED_LIMIT),
    )
