"""
Assemble the read-only ``site`` mapping a template renders against.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional


def build_site_context(base: Optional[Mapping[str, Any]] = None, /, **fields: Any) -> Mapping[str, Any]:
    """
    Merge ``fields`` over the configured site data and freeze the result.

    Later sources win: configured ``[site]`` data, then aggregate values such
    as ``posts`` and ``tags``, then document fields such as ``title``.
    """
    merged = dict(base or {})
    merged.update(fields)
    return MappingProxyType(merged)
