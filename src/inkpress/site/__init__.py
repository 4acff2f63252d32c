"""
Posts, tags and the site context handed to templates.
"""

from .context import build_site_context
from .posts import (
    Deferred,
    PostCollection,
    PostEntry,
    Tag,
    derive_post_url,
    escape_content,
    get_tags,
    sort_by_date,
)

__all__ = [
    "build_site_context",
    "Deferred",
    "PostCollection",
    "PostEntry",
    "Tag",
    "derive_post_url",
    "escape_content",
    "get_tags",
    "sort_by_date",
]
