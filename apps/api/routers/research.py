"""
Research entry routes.

Create is open to any logged-in user. Edit and delete pass an ownership gate
first; an id that does not exist and an id owned by someone else get the same
response.
"""
from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from core.auth import SessionUser, require_user, set_flash
from core.database import get_db
from core.exceptions import ForbiddenError, ValidationError
from core.templating import redirect
from models import ResearchEntry
from services.audit_log import write_audit
from services.research_entries import (
    create_research,
    delete_research,
    get_research_by_id,
    update_research,
)
from services.research_input import normalize_research_form

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/research", tags=["research"])


def _owned_entry(db: Session, raw_id: str, user: SessionUser) -> ResearchEntry:
    """Lookup-and-compare gate for mutating routes."""
    try:
        entry_id = int(raw_id)
    except ValueError:
        raise ValidationError("Invalid request.")

    entry = get_research_by_id(db, entry_id)
    if entry is None or entry.user_id != user.id:
        logger.info(f"User {user.id} denied access to research entry {entry_id}")
        raise ForbiddenError()
    return entry


@router.post("")
async def add_research(
    request: Request,
    title: Optional[str] = Form(None),
    summary: Optional[str] = Form(None),
    tickers: Optional[str] = Form(None),
    confidence: Optional[str] = Form(None),
    minutes_spent: Optional[str] = Form(None),
    links: Optional[List[str]] = Form(None),
    day: Optional[str] = Form(None),
    user: SessionUser = Depends(require_user),
    db: Session = Depends(get_db),
):
    payload = normalize_research_form(
        title=title,
        summary=summary,
        tickers=tickers,
        links=links,
        confidence=confidence,
        minutes_spent=minutes_spent,
        day=day,
    )
    entry = create_research(db, user.id, payload)
    write_audit(db, user.id, "research.create", "research", entry.id, {"day": entry.day})
    db.commit()
    set_flash(request, "success", "Research entry added.")
    return redirect("/dashboard")


@router.post("/{entry_id}/edit")
async def edit_research(
    request: Request,
    entry_id: str,
    title: Optional[str] = Form(None),
    summary: Optional[str] = Form(None),
    tickers: Optional[str] = Form(None),
    confidence: Optional[str] = Form(None),
    minutes_spent: Optional[str] = Form(None),
    links: Optional[List[str]] = Form(None),
    user: SessionUser = Depends(require_user),
    db: Session = Depends(get_db),
):
    entry = _owned_entry(db, entry_id, user)
    payload = normalize_research_form(
        title=title,
        summary=summary,
        tickers=tickers,
        links=links,
        confidence=confidence,
        minutes_spent=minutes_spent,
    )

    if update_research(db, entry.id, user.id, payload):
        write_audit(db, user.id, "research.edit", "research", entry.id, {})
        db.commit()
        set_flash(request, "success", "Research entry updated.")
    else:
        set_flash(request, "error", "Unable to update entry.")
    return redirect("/dashboard")


@router.post("/{entry_id}/delete")
async def remove_research(
    request: Request,
    entry_id: str,
    user: SessionUser = Depends(require_user),
    db: Session = Depends(get_db),
):
    entry = _owned_entry(db, entry_id, user)

    if delete_research(db, entry.id, user.id):
        write_audit(db, user.id, "research.delete", "research", entry.id, {})
        db.commit()
        set_flash(request, "success", "Entry removed.")
    else:
        set_flash(request, "error", "Unable to remove entry.")
    return redirect("/dashboard")
