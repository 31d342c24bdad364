"""Shared utilities."""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)


def normalize_doc_id(raw: str) -> str:
    """Generate a storage-friendly identifier for article keys and slugs."""
    if not raw:
        return ""
    return re.sub(r"[^A-Za-z0-9_\-]", "-", raw)[:100]


def clean_html(html: str) -> str:
    """Return plain-text from HTML."""
    if not html:
        return ""
    try:
        soup = BeautifulSoup(html, "html.parser")
        return soup.get_text(" ", strip=True)
    except Exception as exc:
        logger.warning("Error parsing HTML: %s", exc)
        return str(html)


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length] + "..."


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse a date string; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_time_ago(timestamp: Optional[float], now: Optional[float] = None) -> str:
    """Convert an epoch timestamp to 'X days ago' format."""
    if timestamp is None:
        return ""
    if now is None:
        now = datetime.now(timezone.utc).timestamp()
    days = int((now - timestamp) // 86400)

    if days <= 0:
        return "today"
    elif days == 1:
        return "1 day ago"
    elif days < 30:
        return f"{days} days ago"
    elif days < 365:
        months = days // 30
        return f"{months} month{'s' if months > 1 else ''} ago"
    else:
        years = days // 365
        return f"{years} year{'s' if years > 1 else ''} ago"
