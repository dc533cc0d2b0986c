"""
Daily Check-in Router

The personal dashboard and the one-click daily check-in.
"""

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session
from typing import Optional
import logging

from core import dates
from core.auth import RequestContext, SessionUser, get_request_context, require_user, set_flash
from core.database import get_db
from core.exceptions import UnauthorizedError
from core.templating import redirect, render_page
from services.audit_log import write_audit
from services.checkins import get_checkin, upsert_checkin
from services.research_entries import get_research_for_user
from services.research_input import normalize_note

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Daily Check-in"])

DASHBOARD_RESEARCH_DAYS = 7


@router.get("/dashboard")
async def dashboard(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Today's check-in state and the last week of the user's own research."""
    if ctx.current_user is None:
        raise UnauthorizedError()

    user = ctx.current_user
    today = dates.current_day()
    return render_page(
        request,
        ctx,
        "dashboard.html",
        title="Dashboard",
        today=today,
        checkin=get_checkin(db, user.id, today),
        recent_research=get_research_for_user(db, user.id, DASHBOARD_RESEARCH_DAYS),
    )


@router.post("/checkin")
async def create_or_update_checkin(
    request: Request,
    note: Optional[str] = Form(None),
    user: SessionUser = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Record today's check-in.

    A second submission on the same day replaces the note and timestamp.
    """
    today = dates.current_day()
    saved = upsert_checkin(db, user.id, today, normalize_note(note))
    write_audit(db, user.id, "checkin.upsert", "checkin", saved.id, {"day": today})
    db.commit()
    set_flash(request, "success", "Check-in recorded.")
    return redirect("/dashboard")
