"""
Reader for the s-expression template dialect.

Turns template body text into a tuple of expression forms. The reader only
builds syntax; evaluation lives in :mod:`inkpress.template.evaluator`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .errors import TemplateSyntaxError
from .nodes import Keyword

_INT = re.compile(r"^[+-]?\d+$")
_FLOAT = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_DELIMITERS = set("()[]{}\";'")
_CLOSERS = {"(": ")", "[": "]", "{": "}"}
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}
_CONSTANTS = {"nil": None, "true": True, "false": False}


@dataclass(frozen=True)
class Form:
    """Base class for read forms; carries the source position."""

    line: int
    column: int


@dataclass(frozen=True)
class Literal(Form):
    value: Any


@dataclass(frozen=True)
class Symbol(Form):
    name: str


@dataclass(frozen=True)
class ListForm(Form):
    items: Tuple[Form, ...]


@dataclass(frozen=True)
class VectorForm(Form):
    items: Tuple[Form, ...]


@dataclass(frozen=True)
class MapForm(Form):
    items: Tuple[Form, ...]


@dataclass(frozen=True)
class Quote(Form):
    form: Form


class _Reader:
    def __init__(self, text: str, source: Optional[str], line_offset: int) -> None:
        self.text = text
        self.source = source
        self.pos = 0
        self.line = 1 + line_offset
        self.column = 1

    def error(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            source=self.source,
            line=line if line is not None else self.line,
            column=column if column is not None else self.column,
        )

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def advance(self) -> str:
        char = self.text[self.pos]
        self.pos += 1
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def skip_blank(self) -> None:
        while self.pos < len(self.text):
            char = self.peek()
            if char.isspace() or char == ",":
                self.advance()
            elif char == ";":
                while self.pos < len(self.text) and self.peek() != "\n":
                    self.advance()
            else:
                return

    def read_all(self) -> Tuple[Form, ...]:
        forms: List[Form] = []
        while True:
            self.skip_blank()
            if self.pos >= len(self.text):
                return tuple(forms)
            forms.append(self.read_form())

    def read_form(self) -> Form:
        self.skip_blank()
        line, column = self.line, self.column
        char = self.peek()
        if not char:
            raise self.error("unexpected end of input")
        if char in _CLOSERS:
            self.advance()
            items = self.read_until(_CLOSERS[char], line, column)
            if char == "(":
                return ListForm(line, column, items)
            if char == "[":
                return VectorForm(line, column, items)
            if len(items) % 2:
                raise self.error("map literal needs an even number of forms", line, column)
            return MapForm(line, column, items)
        if char in ")]}":
            raise self.error(f"unexpected '{char}'")
        if char == '"':
            return Literal(line, column, self.read_string())
        if char == "'":
            self.advance()
            return Quote(line, column, self.read_form())
        return self.read_atom(line, column)

    def read_until(self, closer: str, line: int, column: int) -> Tuple[Form, ...]:
        items: List[Form] = []
        while True:
            self.skip_blank()
            char = self.peek()
            if not char:
                raise self.error(f"missing '{closer}' for form opened here", line, column)
            if char == closer:
                self.advance()
                return tuple(items)
            items.append(self.read_form())

    def read_string(self) -> str:
        line, column = self.line, self.column
        self.advance()
        chunks: List[str] = []
        while True:
            if self.pos >= len(self.text):
                raise self.error("unterminated string", line, column)
            char = self.advance()
            if char == '"':
                return "".join(chunks)
            if char == "\\":
                if self.pos >= len(self.text):
                    raise self.error("unterminated string", line, column)
                escaped = self.advance()
                if escaped not in _ESCAPES:
                    raise self.error(f"unknown escape '\\{escaped}'")
                chunks.append(_ESCAPES[escaped])
            else:
                chunks.append(char)

    def read_atom(self, line: int, column: int) -> Form:
        start = self.pos
        while self.pos < len(self.text):
            char = self.peek()
            if char.isspace() or char == "," or char in _DELIMITERS:
                break
            self.advance()
        token = self.text[start:self.pos]
        if token.startswith(":"):
            if len(token) == 1:
                raise self.error("empty keyword", line, column)
            return Literal(line, column, Keyword(token[1:]))
        if token in _CONSTANTS:
            return Literal(line, column, _CONSTANTS[token])
        if _INT.match(token):
            return Literal(line, column, int(token))
        if _FLOAT.match(token):
            return Literal(line, column, float(token))
        return Symbol(line, column, token)


def read_forms(text: str, *, source: Optional[str] = None, line_offset: int = 0) -> Tuple[Form, ...]:
    """
    Read every top-level form in ``text``.

    Args:
        text: Template body (or a single expression string).
        source: Template name used in error messages.
        line_offset: Lines preceding ``text`` in the original file (the option header).

    Raises:
        TemplateSyntaxError: On unbalanced brackets, bad strings or stray closers.
    """
    return _Reader(text, source, line_offset).read_all()
