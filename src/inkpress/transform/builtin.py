"""
Built-in transformers selectable by name from ``site.toml``.

Transformers receive the document tree produced by a page's own body (a list
of nodes, strings and nested lists) and return a tree of the same shape.
"""

from __future__ import annotations

import html
import re
from typing import Any, Callable, Dict, List

from ..template.nodes import Node

_BULLET = re.compile(r"^([*\-•])\s+(.*)")
_HEADING = re.compile(r"^(#{1,6})\s+(.+)$")
_CODE = re.compile(r"`([^`]+)`")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_STRONG = re.compile(r"\*\*(.+?)\*\*")
_EM = re.compile(r"\*(.+?)\*")
_EXTERNAL = re.compile(r"^https?://", re.IGNORECASE)


def _inline(text: str) -> str:
    code_spans: List[str] = []

    def stash(match: re.Match) -> str:
        code_spans.append(f"<code>{match.group(1)}</code>")
        return f"\x00{len(code_spans) - 1}\x00"

    output = _CODE.sub(stash, text)
    output = _LINK.sub(r'<a href="\2">\1</a>', output)
    output = _STRONG.sub(r"<strong>\1</strong>", output)
    output = _EM.sub(r"<em>\1</em>", output)
    return re.sub(r"\x00(\d+)\x00", lambda match: code_spans[int(match.group(1))], output)


def markdown_to_html(text: str) -> str:
    """
    Convert a small markdown subset (headings, lists, emphasis, code, links) to HTML.

    Input is HTML-escaped first, so raw markup inside markdown is shown as text.
    """
    blocks: List[str] = []
    paragraph: List[str] = []
    items: List[str] = []

    def flush_paragraph() -> None:
        if paragraph:
            blocks.append(f"<p>{'<br>'.join(_inline(line) for line in paragraph)}</p>")
            paragraph.clear()

    def flush_list() -> None:
        if items:
            blocks.append("<ul>" + "".join(f"<li>{_inline(item)}</li>" for item in items) + "</ul>")
            items.clear()

    safe_text = html.escape(text or "", quote=True)
    for line in safe_text.splitlines():
        stripped = line.strip()
        bullet = _BULLET.match(stripped)
        heading = _HEADING.match(stripped)
        if not stripped:
            flush_paragraph()
            flush_list()
        elif bullet:
            flush_paragraph()
            items.append(bullet.group(2).strip())
        elif heading:
            flush_paragraph()
            flush_list()
            level = len(heading.group(1))
            blocks.append(f"<h{level}>{_inline(heading.group(2).strip())}</h{level}>")
        else:
            flush_list()
            paragraph.append(stripped)
    flush_paragraph()
    flush_list()
    return "\n".join(blocks)


def map_nodes(value: Any, func: Callable[[Node], Any]) -> Any:
    """
    Rebuild ``value`` bottom-up, passing every node through ``func``.
    """
    if isinstance(value, list):
        return [map_nodes(item, func) for item in value]
    if isinstance(value, Node):
        rebuilt = Node(tag=value.tag, children=map_nodes(value.children, func), attrs=dict(value.attrs))
        return func(rebuilt)
    return value


def _flatten_text(children: List[Any]) -> str:
    parts: List[str] = []
    for child in children:
        if isinstance(child, list):
            parts.append(_flatten_text(child))
        elif child is not None:
            parts.append(str(child))
    return "".join(parts)


def markdown_blocks(tree: Any) -> Any:
    """
    Replace ``[:markdown "..."]`` nodes with the HTML rendering of their text.
    """

    def convert(node: Node) -> Any:
        if node.tag != "markdown":
            return node
        return markdown_to_html(_flatten_text(node.children))

    return map_nodes(tree, convert)


def external_links(tree: Any) -> Any:
    """
    Open absolute ``http(s)`` links in a new tab without leaking the opener.
    """

    def mark(node: Node) -> Node:
        href = node.attrs.get("href")
        if node.tag == "a" and isinstance(href, str) and _EXTERNAL.match(href):
            node.attrs.setdefault("target", "_blank")
            node.attrs.setdefault("rel", "noopener")
        return node

    return map_nodes(tree, mark)


BUILTIN_TRANSFORMERS: Dict[str, Callable[[Any], Any]] = {
    "markdown": markdown_blocks,
    "external-links": external_links,
}
