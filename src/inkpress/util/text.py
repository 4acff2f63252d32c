"""
Text-related helpers.
"""

from __future__ import annotations

import hashlib
import re

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")

# Ampersand first so the entities produced by later replacements survive.
_CONTENT_ESCAPES = (
    ("&", "&amp;"),
    ('"', "&quot;"),
    ("<", "&lt;"),
    (">", "&gt;"),
)


def slugify(value: str) -> str:
    """
    Generate a filesystem-friendly slug.

    Uses hyphens as separators; names without any usable character fall
    back to a short digest of the name.
    """
    raw = (value or "").strip().lower()
    slug = _SLUG_PATTERN.sub("-", raw).strip("-")
    if slug:
        return slug
    return f"item-{short_digest(raw)}"


def short_digest(value: str) -> str:
    """First eight hex digits of the SHA-1 of ``value``."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()[:8]


def escape_content(content: str) -> str:
    """
    Replace markup characters with entities so rendered HTML can be embedded as text.
    """
    escaped = content or ""
    for char, entity in _CONTENT_ESCAPES:
        escaped = escaped.replace(char, entity)
    return escaped


def strip_extension(name: str, extension: str) -> str:
    """Drop a trailing template extension, leaving other names untouched."""
    if extension and name.endswith(extension):
        return name[: -len(extension)]
    return name
