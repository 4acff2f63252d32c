"""
Parse the ``; key: value`` option header at the top of a template.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any, Dict, Optional, Tuple

from ..util.dates import parse_iso_date

logger = logging.getLogger(__name__)

_TAG_SPLIT = re.compile(r"[,\s]+")
_LEGACY_LINE = re.compile(r"^@(?P<key>[\w-]+)\s+(?P<value>.*)$")


@dataclass(frozen=True)
class TagRef:
    """A tag attached to a document (``name`` only; counts live on Tag)."""

    name: str


@dataclass(frozen=True)
class DocumentOptions:
    """
    Options recognized in a template header.

    Attributes:
        layout: Name of the layout wrapping this document.
        title: Document title, merged into ``site`` while rendering.
        tags: Tags attached to the document (header key ``tag``).
        format: Serializer format (``html5``, ``xhtml``, ``html4``).
        date: Explicit document date overriding the filename convention.
        lang: Document language overriding the site default.
    """

    layout: Optional[str] = None
    title: Optional[str] = None
    tags: Tuple[TagRef, ...] = ()
    format: Optional[str] = None
    date: Optional[date] = None
    lang: Optional[str] = None

    @property
    def tag_names(self) -> Tuple[str, ...]:
        return tuple(tag.name for tag in self.tags)

    def as_fields(self) -> Dict[str, Any]:
        """
        Return the options that were set, keyed the way templates see them.
        """
        result: Dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if value is None or value == ():
                continue
            key = "tag" if item.name == "tags" else item.name
            result[key] = list(value) if item.name == "tags" else value
        return result

    def merged_with(self, parent: "DocumentOptions") -> "DocumentOptions":
        """Fill unset options from ``parent`` (a wrapping layout's options)."""
        updates = {
            item.name: getattr(parent, item.name)
            for item in fields(self)
            if getattr(self, item.name) in (None, ()) and item.name != "layout"
        }
        return replace(self, **updates)


def _parse_tags(value: str) -> Tuple[TagRef, ...]:
    seen: Dict[str, TagRef] = {}
    for name in _TAG_SPLIT.split(value.strip()):
        if name and name not in seen:
            seen[name] = TagRef(name)
    return tuple(seen.values())


def _parse_date(value: str) -> Optional[date]:
    parsed = parse_iso_date(value)
    if parsed is None:
        logger.debug("Ignoring unparseable date option %r", value)
    return parsed


_RECOGNIZED = {
    "layout": ("layout", str.strip),
    "title": ("title", str.strip),
    "tag": ("tags", _parse_tags),
    "tags": ("tags", _parse_tags),
    "format": ("format", lambda value: value.strip().lower()),
    "date": ("date", _parse_date),
    "lang": ("lang", str.strip),
}


def _split_header_line(line: str) -> Optional[Tuple[str, str]]:
    text = line.lstrip(";").strip()
    if not text:
        return None
    key, sep, value = text.partition(":")
    if sep and key.strip() and " " not in key.strip():
        return key.strip().lstrip("@"), value
    legacy = _LEGACY_LINE.match(text)
    if legacy:
        return legacy.group("key"), legacy.group("value")
    return None


def parse_options(raw_text: str) -> Tuple[DocumentOptions, str]:
    """
    Split raw template text into its option header and its body.

    The header is the run of leading comment (``;``) and blank lines; each
    comment line of the form ``key: value`` (first colon splits) sets an
    option. Unrecognized keys and malformed lines are skipped.

    Args:
        raw_text: Full template source.

    Returns:
        A ``(DocumentOptions, body)`` tuple; body is the text after the header.
    """
    lines = (raw_text or "").splitlines(keepends=True)
    values: Dict[str, Any] = {}
    header_end = 0
    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped and not stripped.startswith(";"):
            break
        header_end = index + 1
        parsed = _split_header_line(stripped) if stripped else None
        if parsed is None:
            continue
        key, value = parsed
        target = _RECOGNIZED.get(key.lower())
        if target is None:
            logger.debug("Dropping unrecognized option %r", key)
            continue
        field_name, convert = target
        converted = convert(value)
        if converted in (None, "", ()):
            continue
        values[field_name] = converted
    body = "".join(lines[header_end:])
    return DocumentOptions(**values), body
