"""
Resolve ``layout`` chains and compose them around a page's content.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional

from .errors import LayoutCycleError

if TYPE_CHECKING:
    from .compiler import Renderer, TemplateCompiler

logger = logging.getLogger(__name__)


class LayoutResolver:
    """
    Walk layout references and wrap content innermost-first.
    """

    def __init__(self, compiler: "TemplateCompiler") -> None:
        self.compiler = compiler

    def resolve_chain(self, start: str) -> List["Renderer"]:
        """
        Return the layouts from ``start`` outwards, compiled one level each.

        Raises:
            MissingLayoutError: A referenced layout does not exist.
            LayoutCycleError: A layout name is reached twice.
        """
        chain: List["Renderer"] = []
        visited: List[str] = []
        current: Optional[str] = start
        while current:
            if current in visited:
                raise LayoutCycleError(visited + [current])
            visited.append(current)
            layout = self.compiler.compile_layout(current)
            chain.append(layout)
            current = layout.options.layout
        logger.debug("Resolved layout chain %s", " -> ".join(visited))
        return chain

    def wrap(self, inner: Optional["Renderer"], start: str) -> "Renderer":
        """
        Compose the chain starting at ``start`` around ``inner``.

        The document's own layout wraps first, its parent next, and so on
        outwards. Each layout receives the previous result spread as its
        ``content`` arguments. Without ``inner`` the call's own content
        arguments are what the first layout wraps.
        """
        from .compiler import Renderer

        chain = self.resolve_chain(start)
        options = inner.options if inner is not None else chain[0].options
        for layout in chain:
            options = options.merged_with(layout.options)

        def render(site: Any, *content: Any) -> List[Any]:
            result = inner(site, *content) if inner is not None else list(content)
            for layout in chain:
                result = layout(site, *result)
            return result

        name = inner.name if inner is not None else start
        return Renderer(name, options, render)

    def get_layout(self, name: str) -> "Renderer":
        """Return a renderer for layout ``name`` including all of its parents."""
        return self.wrap(None, name)
