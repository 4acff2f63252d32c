"""
Date helpers for posts and templates.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

_DATED_NAME = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+)$")


def utc_today() -> date:
    """Return the current UTC date."""
    return datetime.now(timezone.utc).date()


def parse_iso_date(value: str) -> Optional[date]:
    """
    Parse a ``YYYY-MM-DD`` string (a time component is ignored).

    Returns None when the value is not a valid date.
    """
    text = (value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def split_dated_name(name: str) -> Tuple[Optional[date], str]:
    """
    Split ``2024-05-01-hello.html.sx`` into ``(date(2024, 5, 1), "hello.html.sx")``.

    Names without a valid date prefix come back unchanged with a None date.
    """
    match = _DATED_NAME.match(name)
    if not match:
        return None, name
    year, month, day, rest = match.groups()
    try:
        return date(int(year), int(month), int(day)), rest
    except ValueError:
        return None, name


def derive_date(path: Path) -> date:
    """
    Derive a document date from its filename prefix, falling back to its mtime.
    """
    dated, _ = split_dated_name(path.name)
    if dated is not None:
        return dated
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc).date()
    except OSError:
        return utc_today()
