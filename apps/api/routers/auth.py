"""
Login and logout.

Login matches the submitted name, case-insensitively, against the fixed user
set. There are no passwords.
"""
from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session
from typing import Optional
import logging

from core.auth import RequestContext, clear_session, get_request_context, login_session, set_flash
from core.database import get_db
from core.templating import redirect, render_page
from services.users import get_user_by_name, list_users

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("/login")
async def login_form(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    return render_page(request, ctx, "login.html", title="Login", users=list_users(db))


@router.post("/login")
async def login(
    request: Request,
    name: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    user = get_user_by_name(db, name)
    if not user:
        logger.info("Rejected login attempt")
        set_flash(request, "error", "Unable to log in with that name.")
        return redirect("/login")

    login_session(request, user.id, user.name)
    logger.info(f"User {user.id} logged in")
    set_flash(request, "success", f"Welcome back, {user.name}!")
    return redirect("/dashboard")


@router.post("/logout")
async def logout(request: Request):
    clear_session(request)
    return redirect("/public")
