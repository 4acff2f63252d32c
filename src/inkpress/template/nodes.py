"""
Runtime values produced by compiled templates: keywords, nodes and documents.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

_MISSING = object()


def get_field(target: Any, key: Any, default: Any = None) -> Any:
    """
    Look up ``key`` on a mapping, a sequence (integer keys) or an object attribute.

    Hyphenated names (``tag-name``) fall back to their underscored spelling
    (``tag_name``). Private attributes are never exposed.
    """
    if isinstance(key, Keyword):
        key = key.name
    if target is None:
        return default
    if isinstance(target, Mapping):
        if key in target:
            return target[key]
        if isinstance(key, str) and "-" in key:
            return target.get(key.replace("-", "_"), default)
        return default
    if isinstance(key, int) and isinstance(target, Sequence) and not isinstance(target, str):
        if -len(target) <= key < len(target):
            return target[key]
        return default
    if isinstance(key, str) and not key.startswith("_"):
        value = getattr(target, key.replace("-", "_"), _MISSING)
        if value is not _MISSING:
            return value
    return default


@dataclass(frozen=True)
class Keyword:
    """A ``:name`` literal; calling it looks the name up on its argument."""

    name: str

    def __call__(self, target: Any, default: Any = None) -> Any:
        return get_field(target, self.name, default)

    def __str__(self) -> str:
        return f":{self.name}"


@dataclass
class Node:
    """
    A tagged document-tree node.

    Children are kept in order and may be strings, numbers, nodes, or nested
    lists of those; the serializer flattens nested lists.
    """

    tag: str
    children: List[Any] = field(default_factory=list)
    attrs: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_vector(cls, head: Keyword, items: Sequence[Any]) -> "Node":
        """
        Build a node from an evaluated ``[:tag {attrs} child...]`` vector.

        ``:div#main.wide.dark`` expands into ``id="main"`` and ``class="wide dark"``;
        classes given in the attribute map are appended after shorthand ones.
        """
        tag, attrs = _split_tag(head.name)
        children = list(items)
        if children and isinstance(children[0], Mapping):
            extra = dict(children.pop(0))
            if "class" in extra and "class" in attrs:
                extra["class"] = f"{attrs['class']} {extra['class']}"
            attrs.update(extra)
        return cls(tag=tag, children=children, attrs=attrs)


def _split_tag(shorthand: str) -> tuple[str, Dict[str, Any]]:
    attrs: Dict[str, Any] = {}
    tag = shorthand
    classes: List[str] = []
    if "." in tag:
        tag, *classes = tag.split(".")
    if "#" in tag:
        tag, element_id = tag.split("#", 1)
        attrs["id"] = element_id
    classes = [name for name in classes if name]
    if classes:
        attrs["class"] = " ".join(classes)
    return tag or "div", attrs


@dataclass
class Document:
    """
    A rendered document tree plus the metadata the serializer dispatches on.

    Attributes:
        nodes: Top-level document tree (ordered siblings).
        meta: Serializer hints such as ``format`` and ``lang``.
    """

    nodes: List[Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def format(self) -> Optional[str]:
        return self.meta.get("format")
