"""
Ordered transformer registry and the pipeline that evaluates it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from ..template.errors import TemplateSyntaxError
from ..template.evaluator import Evaluator
from ..template.reader import read_forms

logger = logging.getLogger(__name__)

Transformer = Callable[[Any], Any]
RenderFunction = Callable[..., List[Any]]

EXPRESSION_SOURCE = "<expression>"


class TransformerRegistry:
    """
    Append-only, ordered collection of transformers.

    Registration happens during startup; render passes only iterate. Nothing
    here is locked, so do not register while a build is running.
    """

    def __init__(self, transformers: Optional[Iterable[Transformer]] = None) -> None:
        self._transformers: List[Transformer] = list(transformers or [])

    def append(self, transformer: Transformer) -> Transformer:
        if not callable(transformer):
            raise TypeError(f"transformer must be callable, got {type(transformer).__name__}")
        self._transformers.append(transformer)
        logger.debug("Registered transformer %s (%d total)", _name_of(transformer), len(self._transformers))
        return transformer

    def __contains__(self, transformer: object) -> bool:
        return transformer in self._transformers

    def reset(self) -> None:
        self._transformers.clear()

    def __iter__(self) -> Iterator[Transformer]:
        return iter(list(self._transformers))

    def __len__(self) -> int:
        return len(self._transformers)

    def __repr__(self) -> str:
        names = ", ".join(_name_of(item) for item in self._transformers)
        return f"TransformerRegistry([{names}])"


def _name_of(transformer: Transformer) -> str:
    return getattr(transformer, "__name__", type(transformer).__name__)


class TransformPipeline:
    """
    Apply registered transformers in order, or compile expression strings.

    Attributes:
        registry: The transformers applied by :meth:`transform`.
    """

    def __init__(self, registry: Optional[TransformerRegistry] = None) -> None:
        self.registry = registry if registry is not None else TransformerRegistry()
        self._expressions: Dict[str, RenderFunction] = {}

    def add_transformer(self, transformer: Transformer) -> Transformer:
        return self.registry.append(transformer)

    def transform(self, value: Any) -> Any:
        """
        Thread ``value`` through every registered transformer, left to right.

        A string is treated as an expression instead: it is compiled into a
        ``render(site, *content)`` function returning a one-element list holding
        the expression's value. The registry is not consulted for strings.
        """
        if isinstance(value, str):
            return self.compile_expression(value)
        for transformer in self.registry:
            value = transformer(value)
        return value

    def compile_expression(self, expression: str) -> RenderFunction:
        """Compile (once per distinct string) a single expression into a render function."""
        cached = self._expressions.get(expression)
        if cached is not None:
            return cached
        forms = read_forms(expression, source=EXPRESSION_SOURCE)
        if len(forms) != 1:
            raise TemplateSyntaxError(
                f"expected exactly one expression, found {len(forms)}", source=EXPRESSION_SOURCE
            )
        form = forms[0]
        evaluator = Evaluator(source=EXPRESSION_SOURCE, builtins={"transform": self.transform})

        def render(site: Any = None, *content: Any) -> List[Any]:
            return [evaluator.eval(form, {"site": site, "content": list(content)})]

        render.__name__ = "expression"
        self._expressions[expression] = render
        return render


_DEFAULT_PIPELINE = TransformPipeline()


def default_pipeline() -> TransformPipeline:
    """Return the process-wide pipeline."""
    return _DEFAULT_PIPELINE


def default_registry() -> TransformerRegistry:
    return _DEFAULT_PIPELINE.registry


def add_transformer(transformer: Transformer) -> Transformer:
    """Append ``transformer`` to the process-wide registry."""
    return _DEFAULT_PIPELINE.add_transformer(transformer)


def transform(value: Any) -> Any:
    """Run ``value`` through the process-wide pipeline."""
    return _DEFAULT_PIPELINE.transform(value)


@contextmanager
def override_registry(registry: TransformerRegistry):
    """
    Temporarily swap the registry used by the process-wide pipeline.
    """
    previous = _DEFAULT_PIPELINE.registry
    _DEFAULT_PIPELINE.registry = registry
    try:
        yield registry
    finally:
        _DEFAULT_PIPELINE.registry = previous
