"""
Shared utility helpers for filesystem access, strings, and dates.
"""

from .filesystem import list_files, read_text_file, write_text_file
from .text import escape_content, short_digest, slugify, strip_extension
from .dates import derive_date, parse_iso_date, split_dated_name

__all__ = [
    "list_files",
    "read_text_file",
    "write_text_file",
    "escape_content",
    "short_digest",
    "slugify",
    "strip_extension",
    "derive_date",
    "parse_iso_date",
    "split_dated_name",
]
