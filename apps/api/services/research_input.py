"""
Form input normalization for check-ins and research entries.

Everything here is a pure function of its input. Values leaving this module
are already trimmed, capped and clamped, so the persistence layer stores them
as-is and the analytics layer never re-validates them.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union
from urllib.parse import urlsplit, urlunsplit

from core import dates
from core.exceptions import ValidationError

TITLE_MAX_LENGTH = 255
SUMMARY_MAX_LENGTH = 5000
TICKERS_MAX_LENGTH = 255
NOTE_MAX_LENGTH = 2000

CONFIDENCE_MIN, CONFIDENCE_MAX, CONFIDENCE_DEFAULT = 1, 5, 3
MINUTES_MIN, MINUTES_MAX, MINUTES_DEFAULT = 0, 1440, 0

ALLOWED_LINK_SCHEMES = ("http", "https")

_LINK_SEPARATORS = re.compile(r"[\n,]+")


@dataclass
class ResearchPayload:
    title: str
    summary: str
    tickers: str
    links: List[str] = field(default_factory=list)
    confidence: int = CONFIDENCE_DEFAULT
    minutes_spent: int = MINUTES_DEFAULT
    day: Optional[str] = None


def parse_tickers(raw: Optional[str]) -> str:
    """
    ``" btc, eth ,,sol "`` -> ``"BTC,ETH,SOL"``.

    Split on commas, trim, drop empties, uppercase, cap the joined string.
    """
    if not raw:
        return ""
    tokens = [token.strip().upper() for token in raw.split(",")]
    return ",".join(token for token in tokens if token)[:TICKERS_MAX_LENGTH]


def _tokenize_links(raw: Union[str, Iterable[str], None]) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        values = [raw]
    else:
        values = [value for value in raw if isinstance(value, str)]
    tokens: List[str] = []
    for value in values:
        tokens.extend(_LINK_SEPARATORS.split(value))
    return [token.strip() for token in tokens if token.strip()]


def normalize_link(token: str) -> Optional[str]:
    """
    Return the normalized form of an absolute http(s) URL, or None.

    Accepted: scheme in ALLOWED_LINK_SCHEMES, a host, no whitespace, a valid
    port. Scheme and host are lowercased and an empty path becomes ``/``.
    """
    if any(ch.isspace() for ch in token):
        return None
    try:
        parts = urlsplit(token)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_LINK_SCHEMES or not parts.hostname:
        return None

    netloc = parts.netloc
    host_start = netloc.rfind("@") + 1
    netloc = netloc[:host_start] + netloc[host_start:].lower()
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))


def parse_links(raw: Union[str, Iterable[str], None]) -> List[str]:
    """
    Tokenize on commas/newlines and keep only valid absolute http(s) URLs.

    Order is preserved; malformed tokens are dropped without error.
    """
    links = []
    for token in _tokenize_links(raw):
        link = normalize_link(token)
        if link is not None:
            links.append(link)
    return links


def clamp_int(raw: Union[str, int, float, None], low: int, high: int, default: int) -> int:
    """Parse ``raw`` as a number and clamp it into [low, high]; non-numeric -> default."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if math.isnan(value):
        return default
    return int(min(high, max(low, value)))


def normalize_note(raw: Optional[str]) -> str:
    return (raw or "")[:NOTE_MAX_LENGTH]


def normalize_research_form(
    title: Optional[str],
    summary: Optional[str],
    tickers: Optional[str] = None,
    links: Union[str, Iterable[str], None] = None,
    confidence: Optional[str] = None,
    minutes_spent: Optional[str] = None,
    day: Optional[str] = None,
) -> ResearchPayload:
    """
    Validate and normalize a research form submission.

    Raises:
        ValidationError: title or summary empty after trimming, or a ``day``
            that is not a canonical YYYY-MM-DD date
    """
    title = (title or "").strip()
    summary = (summary or "").strip()
    if not title or not summary:
        raise ValidationError("Title and summary are required.")

    day = (day or "").strip() or None
    if day is not None and not dates.is_canonical_day(day):
        raise ValidationError("Day must be a date in YYYY-MM-DD format.")

    return ResearchPayload(
        title=title[:TITLE_MAX_LENGTH],
        summary=summary[:SUMMARY_MAX_LENGTH],
        tickers=parse_tickers(tickers),
        links=parse_links(links),
        confidence=clamp_int(confidence, CONFIDENCE_MIN, CONFIDENCE_MAX, CONFIDENCE_DEFAULT),
        minutes_spent=clamp_int(minutes_spent, MINUTES_MIN, MINUTES_MAX, MINUTES_DEFAULT),
        day=day,
    )
