"""
Exceptions raised while loading, compiling and composing templates.
"""

from __future__ import annotations

from typing import Optional, Sequence


class TemplateError(RuntimeError):
    """Base class for template engine failures."""


class MissingTemplateError(TemplateError):
    """Raised when a template or post source file does not exist."""

    def __init__(self, name: str, path: Optional[str] = None) -> None:
        self.name = name
        self.path = path
        where = f" (looked for {path})" if path else ""
        super().__init__(f"Template '{name}' not found{where}")


class MissingLayoutError(TemplateError):
    """Raised when a ``layout`` option names a layout that does not exist."""

    def __init__(self, name: str, path: Optional[str] = None) -> None:
        self.name = name
        self.path = path
        where = f" (looked for {path})" if path else ""
        super().__init__(f"Layout '{name}' not found{where}")


class LayoutCycleError(TemplateError):
    """Raised when a layout chain refers back to a layout it already visited."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__("Layout cycle detected: " + " -> ".join(self.chain))


class TemplateCompileError(TemplateError):
    """
    Raised when a template body cannot be read or evaluated.

    Attributes:
        source: Template name or path the error belongs to (may be None).
        line: 1-based line of the offending form, when known.
        column: 1-based column of the offending form, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.message = message
        self.source = source
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.source or "<template>"
        if self.line is not None:
            location = f"{location}:{self.line}"
            if self.column is not None:
                location = f"{location}:{self.column}"
        return f"{location}: {self.message}"

    def __str__(self) -> str:
        return self._format()


class TemplateSyntaxError(TemplateCompileError):
    """Raised by the reader on malformed template source."""


class TemplateEvaluationError(TemplateCompileError):
    """Raised when evaluating a compiled template form fails."""
