"""
Serialize document trees into HTML5, XHTML, HTML 4 or generic markup.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from ..template.nodes import Document, Keyword, Node

logger = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    }
)

_HTML4_DOCTYPE = '<!DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01//EN" "http://www.w3.org/TR/html4/strict.dtd">'
_XHTML_DOCTYPE = (
    '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
    '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">'
)


class SerializationError(RuntimeError):
    """Raised when a document tree contains something that cannot be written as markup."""


def _attribute_text(value: Any) -> str:
    if isinstance(value, Keyword):
        return value.name
    if isinstance(value, (list, tuple)):
        return " ".join(_attribute_text(item) for item in value)
    return str(value)


def _render_attrs(attrs: Dict[str, Any], mode: str) -> str:
    parts: List[str] = []
    for key, value in attrs.items():
        if value is None or value is False:
            continue
        name = html.escape(str(key), quote=True)
        if value is True:
            parts.append(f" {name}" if mode == "html" else f' {name}="{name}"')
            continue
        parts.append(f' {name}="{html.escape(_attribute_text(value), quote=True)}"')
    return "".join(parts)


def _render(value: Any, mode: str, out: List[str]) -> None:
    if value is None:
        return
    if isinstance(value, str):
        out.append(value)
    elif isinstance(value, Node):
        _render_node(value, mode, out)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _render(item, mode, out)
    elif isinstance(value, bool):
        out.append("true" if value else "false")
    elif isinstance(value, (int, float, date)):
        out.append(str(value))
    elif isinstance(value, Keyword):
        out.append(value.name)
    elif isinstance(value, Mapping) or callable(value):
        raise SerializationError(f"cannot serialize {type(value).__name__} as markup: {value!r}")
    else:
        out.append(str(value))


def _render_node(node: Node, mode: str, out: List[str]) -> None:
    tag = node.tag
    attrs = _render_attrs(node.attrs, mode)
    if tag in VOID_ELEMENTS and not _has_children(node.children):
        out.append(f"<{tag}{attrs}>" if mode == "html" else f"<{tag}{attrs} />")
        return
    out.append(f"<{tag}{attrs}>")
    for child in node.children:
        _render(child, mode, out)
    out.append(f"</{tag}>")


def _has_children(children: List[Any]) -> bool:
    return any(child is not None and child != [] for child in children)


def serialize_nodes(nodes: Any, mode: str = "xml") -> str:
    """
    Serialize a node, string or (nested) list of them without any document wrapper.

    Text is written verbatim so templates can embed raw markup; attribute
    values are escaped. ``mode`` is ``"html"`` (``<br>``) or ``"xml"`` (``<br />``).
    """
    out: List[str] = []
    _render(nodes, mode, out)
    return "".join(out)


def _html5(nodes: List[Any], lang: Optional[str]) -> str:
    lang_attr = _render_attrs({"lang": lang}, "html")
    return f"<!DOCTYPE html>\n<html{lang_attr}>{serialize_nodes(nodes, 'html')}</html>"


def _xhtml(nodes: List[Any], lang: Optional[str]) -> str:
    attrs = _render_attrs({"xmlns": "http://www.w3.org/1999/xhtml", "xml:lang": lang, "lang": lang}, "xml")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f"{_XHTML_DOCTYPE}\n<html{attrs}>{serialize_nodes(nodes, 'xml')}</html>"
    )


def _html4(nodes: List[Any], lang: Optional[str]) -> str:
    return f"{_HTML4_DOCTYPE}\n<html>{serialize_nodes(nodes, 'html')}</html>"


def _generic(nodes: List[Any], lang: Optional[str]) -> str:
    return serialize_nodes(nodes, "xml")


_SERIALIZERS: Dict[str, Callable[[List[Any], Optional[str]], str]] = {
    "html5": _html5,
    "xhtml": _xhtml,
    "html4": _html4,
}

SUPPORTED_FORMATS = tuple(sorted(_SERIALIZERS))


def serialize(document: Document, *, lang: Optional[str] = None) -> str:
    """
    Serialize ``document`` according to the ``format`` in its metadata.

    Args:
        document: Rendered tree plus metadata (``format``, ``lang``).
        lang: Fallback language when the document metadata has none.

    Returns:
        The markup text. Documents without a recognized format use the generic serializer.

    Raises:
        SerializationError: The tree contains values that have no markup form.
    """
    fmt = document.format
    serializer = _SERIALIZERS.get(fmt or "")
    if serializer is None:
        if fmt:
            logger.warning(
                "Unknown output format %r (supported: %s); using generic markup", fmt, ", ".join(SUPPORTED_FORMATS)
            )
        serializer = _generic
    return serializer(document.nodes, document.meta.get("lang") or lang)
