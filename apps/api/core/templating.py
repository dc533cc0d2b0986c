"""
Server-side rendering.

Pages render in two explicit stages: the view template is rendered to a
string first, then ``layout.html`` is rendered with that string in its
``body`` slot. Autoescaping is on for every ``.html`` template.
"""
import re
from pathlib import Path
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from markupsafe import Markup, escape

from core.auth import RequestContext
from core.dates import format_day_short
from services.research_input import normalize_link

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

# Stops at whitespace and at any escaped entity except &amp; (quotes, angle brackets)
_URL_PATTERN = re.compile(r"https?://(?:[^\s<&]|&amp;)+", re.IGNORECASE)


def linkify(text: Optional[str]) -> Markup:
    """
    Escape ``text`` and turn http(s) URLs in it into anchors.

    Escaping happens first, so the only markup in the result is the anchors
    added here.
    """
    escaped = str(escape(text or ""))

    def _anchor(match: "re.Match[str]") -> str:
        # The match is already escaped text; unescape only for validation.
        raw = match.group(0).replace("&amp;", "&")
        href = normalize_link(raw)
        if href is None:
            return match.group(0)
        safe_href = escape(href)
        return (
            f'<a href="{safe_href}" class="text-blue-500 underline" '
            f'target="_blank" rel="noopener noreferrer">{safe_href}</a>'
        )

    return Markup(_URL_PATTERN.sub(_anchor, escaped))


templates.env.filters["linkify"] = linkify
templates.env.filters["format_day_short"] = format_day_short


def redirect(url: str, status_code: int = 303) -> RedirectResponse:
    """303 by default so the browser follows a POST with a GET."""
    return RedirectResponse(url, status_code=status_code)


def render_page(
    request: Request,
    ctx: RequestContext,
    view: str,
    title: str,
    status_code: int = 200,
    **context: Any,
):
    """Render ``view`` into the layout and return the HTML response."""
    values = {"ctx": ctx, "title": title, **context}
    body = templates.get_template(view).render(**values)
    return templates.TemplateResponse(
        request,
        "layout.html",
        {**values, "body": Markup(body)},
        status_code=status_code,
    )
