"""
Compile template sources into reusable render functions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple

from .evaluator import Evaluator
from .layout import LayoutResolver
from .loader import TemplateLoader
from .options import DocumentOptions, parse_options
from .reader import Form, read_forms

if TYPE_CHECKING:
    from ..transform import TransformPipeline

logger = logging.getLogger(__name__)


class Renderer:
    """
    A compiled template: call it as ``renderer(site, *content)`` to get a document tree.

    Attributes:
        name: Template or layout name.
        options: Options governing this render (merged across the layout chain).
    """

    def __init__(self, name: str, options: DocumentOptions, func: Callable[..., List[Any]]) -> None:
        self.name = name
        self.options = options
        self._func = func

    def __call__(self, site: Any, *content: Any) -> List[Any]:
        return self._func(site, *content)

    def __repr__(self) -> str:
        return f"Renderer({self.name!r})"


@dataclass(frozen=True)
class ParsedTemplate:
    """Options and read forms of one template source."""

    name: str
    options: DocumentOptions
    forms: Tuple[Form, ...]


class TemplateCompiler:
    """
    Turn template sources into :class:`Renderer` objects.

    Parsed sources are cached per compiler, so build a fresh compiler for
    each build pass if sources may change in between.
    """

    def __init__(self, loader: TemplateLoader, pipeline: Optional["TransformPipeline"] = None) -> None:
        if pipeline is None:
            from ..transform import default_pipeline

            pipeline = default_pipeline()
        self.loader = loader
        self.pipeline = pipeline
        self.layouts = LayoutResolver(self)
        self._parsed: Dict[Tuple[str, str], ParsedTemplate] = {}

    def parse(self, name: str, *, layout: bool = False) -> ParsedTemplate:
        key = ("layout" if layout else "template", name)
        cached = self._parsed.get(key)
        if cached is not None:
            return cached
        if layout:
            raw = self.loader.read_layout_source(name)
            source = f"layout '{name}'"
        else:
            raw = self.loader.read_template_source(name)
            source = name
        options, body = parse_options(raw)
        header_lines = raw[: len(raw) - len(body)].count("\n")
        forms = read_forms(body, source=source, line_offset=header_lines)
        parsed = ParsedTemplate(name=name, options=options, forms=forms)
        self._parsed[key] = parsed
        logger.debug("Parsed %s (%d top-level forms)", source, len(forms))
        return parsed

    def _body_function(self, parsed: ParsedTemplate, source: str) -> Callable[..., List[Any]]:
        evaluator = Evaluator(source=source, builtins={"transform": self.pipeline.transform})
        forms = parsed.forms

        def render(site: Any, *content: Any) -> List[Any]:
            scope = {"site": site, "content": list(content)}
            result: List[Any] = []
            for form in forms:
                value = evaluator.eval(form, scope)
                # Plain lists at top level are siblings, not a nested child.
                if isinstance(value, list):
                    result.extend(value)
                else:
                    result.append(value)
            return result

        return render

    def compile_layout(self, name: str) -> Renderer:
        """Compile a single layout without following its own ``layout`` option."""
        parsed = self.parse(name, layout=True)
        return Renderer(name, parsed.options, self._body_function(parsed, f"layout '{name}'"))

    def compile_template(self, name: str, allow_layout: bool = True) -> Renderer:
        """
        Compile the template ``name``.

        The page's own body output is passed once through the transform
        pipeline. With ``allow_layout`` and a ``layout`` option, the layout
        chain is composed around that body; otherwise the bare body is
        returned (used for post summaries and feeds).

        Raises:
            MissingTemplateError: The template file does not exist.
            MissingLayoutError: A layout in the chain does not exist.
            LayoutCycleError: The layout chain loops.
            TemplateCompileError: The body cannot be read.
        """
        parsed = self.parse(name)
        body = self._body_function(parsed, name)
        pipeline = self.pipeline

        def render(site: Any, *content: Any) -> List[Any]:
            return pipeline.transform(body(site, *content))

        renderer = Renderer(name, parsed.options, render)
        if allow_layout and parsed.options.layout:
            return self.layouts.wrap(renderer, parsed.options.layout)
        return renderer
