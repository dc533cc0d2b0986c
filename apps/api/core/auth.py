"""
Session authentication and the per-request context.

Provides FastAPI dependencies for:
- Building the RequestContext passed explicitly to every rendered view
- Requiring a logged-in user on mutating routes

Login is by name only. The signed session cookie carries the user's id and
name, plus at most one pending flash message.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from core.exceptions import UnauthorizedError

_SESSION_USER_KEY = "user"
_SESSION_FLASH_KEY = "flash"


@dataclass(frozen=True)
class SessionUser:
    id: int
    name: str


@dataclass(frozen=True)
class Flash:
    type: str  # success | error
    message: str


@dataclass(frozen=True)
class RequestContext:
    """What a view needs to know about the request: who, and any pending notice."""
    current_user: Optional[SessionUser] = None
    flash: Optional[Flash] = None


def set_flash(request: Request, flash_type: str, message: str) -> None:
    """Queue a message for the next rendered page."""
    request.session[_SESSION_FLASH_KEY] = {"type": flash_type, "message": message}


def pop_flash(request: Request) -> Optional[Flash]:
    data = request.session.pop(_SESSION_FLASH_KEY, None)
    if not data:
        return None
    return Flash(type=data.get("type", "success"), message=data.get("message", ""))


def get_session_user(request: Request) -> Optional[SessionUser]:
    data = request.session.get(_SESSION_USER_KEY)
    if not data:
        return None
    try:
        return SessionUser(id=int(data["id"]), name=str(data["name"]))
    except (KeyError, TypeError, ValueError):
        # Unreadable payload: treat as logged out
        request.session.pop(_SESSION_USER_KEY, None)
        return None


def login_session(request: Request, user_id: int, name: str) -> None:
    request.session[_SESSION_USER_KEY] = {"id": user_id, "name": name}


def clear_session(request: Request) -> None:
    request.session.clear()


def get_request_context(request: Request) -> RequestContext:
    """
    Dependency for rendering routes.

    Consumes the pending flash, so it is shown on exactly one page.
    """
    return RequestContext(current_user=get_session_user(request), flash=pop_flash(request))


def require_user(request: Request) -> SessionUser:
    """
    Dependency for authenticated routes.

    Raises UnauthorizedError (redirect to /login with a flash) if no one is logged in.
    """
    user = get_session_user(request)
    if user is None:
        raise UnauthorizedError()
    return user
