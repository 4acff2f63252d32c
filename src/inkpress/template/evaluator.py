"""
Evaluator for forms produced by :mod:`inkpress.template.reader`.

This is a deliberately small interpreter: literals, vectors (document
nodes), maps, a handful of special forms and a fixed table of builtins.
Templates never reach the host interpreter; they can only call builtins,
keywords, ``fn`` closures and callables handed to them through ``site``.
"""

from __future__ import annotations

import functools
import operator
from collections import ChainMap
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping as MappingType, MutableMapping, Optional, Sequence

from ..util.text import escape_content, slugify
from .errors import TemplateEvaluationError
from .nodes import Keyword, Node, get_field
from .reader import Form, ListForm, Literal, MapForm, Quote, Symbol, VectorForm

Scope = MutableMapping[str, Any]


def truthy(value: Any) -> bool:
    """Only ``nil`` and ``false`` are false."""
    return value is not None and value is not False


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def _seq(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, Node):
        # Keyword-headed vectors are read as nodes; as sequences they are hiccup vectors again.
        head: List[Any] = [Keyword(value.tag)]
        if value.attrs:
            head.append(dict(value.attrs))
        return head + list(value.children)
    if isinstance(value, Mapping):
        return [[key, item] for key, item in value.items()]
    if isinstance(value, str):
        return list(value)
    if isinstance(value, Iterable):
        return list(value)
    raise TypeError(f"{type(value).__name__} is not a sequence")


def _add(*args: Any) -> Any:
    return functools.reduce(operator.add, args, 0)


def _sub(first: Any, *rest: Any) -> Any:
    if not rest:
        return -first
    return functools.reduce(operator.sub, rest, first)


def _mul(*args: Any) -> Any:
    return functools.reduce(operator.mul, args, 1)


def _div(first: Any, *rest: Any) -> Any:
    if not rest:
        rest, first = (first,), 1
    result = first
    for divisor in rest:
        if isinstance(result, int) and isinstance(divisor, int) and divisor and result % divisor == 0:
            result = result // divisor
        else:
            result = result / divisor
    return result


def _chain(compare: Callable[[Any, Any], bool]) -> Callable[..., bool]:
    def check(*args: Any) -> bool:
        return all(compare(left, right) for left, right in zip(args, args[1:]))

    return check


def _apply(func: Callable[..., Any], *args: Any) -> Any:
    if not args:
        return func()
    *leading, last = args
    return func(*leading, *_seq(last))


def _map(func: Callable[..., Any], *colls: Any) -> List[Any]:
    if len(colls) == 1:
        return [func(item) for item in _seq(colls[0])]
    return [func(*items) for items in zip(*(_seq(coll) for coll in colls))]


def _nth(coll: Any, index: int, default: Any = None) -> Any:
    items = _seq(coll)
    if 0 <= index < len(items):
        return items[index]
    return default


def _range(*args: int) -> List[int]:
    return list(range(*args))


def _concat(*colls: Any) -> List[Any]:
    result: List[Any] = []
    for coll in colls:
        result.extend(_seq(coll))
    return result


def _get_in(target: Any, keys: Sequence[Any], default: Any = None) -> Any:
    current = target
    for key in _seq(keys):
        current = get_field(current, key, None)
        if current is None:
            return default
    return current


def _join(*args: Any) -> str:
    if len(args) == 1:
        separator, coll = "", args[0]
    elif len(args) == 2:
        separator, coll = args
    else:
        raise TypeError(f"join takes 1 or 2 arguments ({len(args)} given)")
    return to_text(separator).join(to_text(item) for item in _seq(coll))


def _sort_by(keyfn: Callable[[Any], Any], coll: Any) -> List[Any]:
    return sorted(_seq(coll), key=keyfn)


def _format_date(value: Any, fmt: str = "%Y-%m-%d") -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt)
    raise TypeError(f"format-date expects a date, got {type(value).__name__}")


BUILTINS: Dict[str, Callable[..., Any]] = {
    "+": _add,
    "-": _sub,
    "*": _mul,
    "/": _div,
    "mod": operator.mod,
    "inc": lambda value: value + 1,
    "dec": lambda value: value - 1,
    "=": _chain(operator.eq),
    "not=": lambda *args: not _chain(operator.eq)(*args),
    "<": _chain(operator.lt),
    ">": _chain(operator.gt),
    "<=": _chain(operator.le),
    ">=": _chain(operator.ge),
    "not": lambda value: not truthy(value),
    "str": lambda *args: "".join(to_text(arg) for arg in args),
    "apply": _apply,
    "list": lambda *args: list(args),
    "vector": lambda *args: list(args),
    "count": lambda coll: len(_seq(coll)),
    "first": lambda coll: next(iter(_seq(coll)), None),
    "rest": lambda coll: _seq(coll)[1:],
    "last": lambda coll: (_seq(coll) or [None])[-1],
    "nth": _nth,
    "take": lambda count, coll: _seq(coll)[: max(count, 0)],
    "drop": lambda count, coll: _seq(coll)[max(count, 0):],
    "map": _map,
    "filter": lambda pred, coll: [item for item in _seq(coll) if truthy(pred(item))],
    "reverse": lambda coll: list(reversed(_seq(coll))),
    "range": _range,
    "concat": _concat,
    "sort-by": _sort_by,
    "get": get_field,
    "get-in": _get_in,
    "join": _join,
    "empty?": lambda coll: len(_seq(coll)) == 0,
    "nil?": lambda value: value is None,
    "escape": lambda value: escape_content(to_text(value)),
    "slugify": lambda value: slugify(to_text(value)),
    "format-date": _format_date,
}

_EVAL_ERRORS = (
    TypeError,
    ValueError,
    ZeroDivisionError,
    ArithmeticError,
    AttributeError,
    IndexError,
    KeyError,
    RecursionError,
)


class Lambda:
    """A closure created by ``(fn [params] body...)``."""

    def __init__(self, evaluator: "Evaluator", params: List[str], variadic: Optional[str], body: Sequence[Form], scope: Scope, form: Form) -> None:
        self.evaluator = evaluator
        self.params = params
        self.variadic = variadic
        self.body = body
        self.scope = scope
        self.form = form

    def __call__(self, *args: Any) -> Any:
        if len(args) < len(self.params) or (self.variadic is None and len(args) > len(self.params)):
            raise self.evaluator.error(
                f"fn expects {len(self.params)} argument(s), got {len(args)}", self.form
            )
        bindings = dict(zip(self.params, args))
        if self.variadic is not None:
            bindings[self.variadic] = list(args[len(self.params):])
        return self.evaluator.eval_body(self.body, ChainMap(bindings, self.scope))

    def __repr__(self) -> str:
        return f"<fn {self.params}>"


class Evaluator:
    """
    Evaluate template forms against a scope.

    Attributes:
        source: Template name used in error messages.
        builtins: Functions resolvable by bare symbol, after scope lookups.
    """

    def __init__(self, *, source: Optional[str] = None, builtins: Optional[MappingType[str, Any]] = None) -> None:
        self.source = source
        self.builtins: Dict[str, Any] = dict(BUILTINS)
        if builtins:
            self.builtins.update(builtins)
        self._special = {
            "if": self._eval_if,
            "when": self._eval_when,
            "let": self._eval_let,
            "for": self._eval_for,
            "fn": self._eval_fn,
            "do": lambda form, scope: self.eval_body(form.items[1:], scope),
            "and": self._eval_and,
            "or": self._eval_or,
            "quote": self._eval_quote,
        }

    def error(self, message: str, form: Form) -> TemplateEvaluationError:
        return TemplateEvaluationError(message, source=self.source, line=form.line, column=form.column)

    def eval_body(self, forms: Sequence[Form], scope: Scope) -> Any:
        result = None
        for form in forms:
            result = self.eval(form, scope)
        return result

    def eval(self, form: Form, scope: Scope) -> Any:
        if isinstance(form, Literal):
            return form.value
        if isinstance(form, Symbol):
            return self._resolve(form, scope)
        if isinstance(form, VectorForm):
            items = [self.eval(item, scope) for item in form.items]
            if items and isinstance(items[0], Keyword):
                return Node.from_vector(items[0], items[1:])
            return items
        if isinstance(form, MapForm):
            result: Dict[Any, Any] = {}
            for key_form, value_form in zip(form.items[::2], form.items[1::2]):
                key = self.eval(key_form, scope)
                result[key.name if isinstance(key, Keyword) else key] = self.eval(value_form, scope)
            return result
        if isinstance(form, Quote):
            return _quoted(form.form)
        if isinstance(form, ListForm):
            return self._eval_list(form, scope)
        raise self.error(f"cannot evaluate {type(form).__name__}", form)

    def _resolve(self, form: Symbol, scope: Scope) -> Any:
        if form.name in scope:
            return scope[form.name]
        if form.name in self.builtins:
            return self.builtins[form.name]
        raise self.error(f"unable to resolve symbol '{form.name}'", form)

    def _eval_list(self, form: ListForm, scope: Scope) -> Any:
        if not form.items:
            return []
        head = form.items[0]
        if isinstance(head, Symbol) and head.name in self._special and head.name not in scope:
            return self._special[head.name](form, scope)
        func = self.eval(head, scope)
        args = [self.eval(item, scope) for item in form.items[1:]]
        if not callable(func):
            raise self.error(f"{to_text(func)!r} is not callable", form)
        try:
            return func(*args)
        except _EVAL_ERRORS as exc:
            raise self.error(f"error calling {_describe(head)}: {exc}", form) from exc

    def _eval_if(self, form: ListForm, scope: Scope) -> Any:
        if len(form.items) not in (3, 4):
            raise self.error("if expects a test, a then form and an optional else form", form)
        if truthy(self.eval(form.items[1], scope)):
            return self.eval(form.items[2], scope)
        if len(form.items) == 4:
            return self.eval(form.items[3], scope)
        return None

    def _eval_when(self, form: ListForm, scope: Scope) -> Any:
        if len(form.items) < 2:
            raise self.error("when expects a test", form)
        if truthy(self.eval(form.items[1], scope)):
            return self.eval_body(form.items[2:], scope)
        return None

    def _bindings(self, form: ListForm, name: str) -> List[tuple[str, Form]]:
        if len(form.items) < 2 or not isinstance(form.items[1], VectorForm):
            raise self.error(f"{name} expects a binding vector", form)
        items = form.items[1].items
        if len(items) % 2:
            raise self.error(f"{name} bindings need an even number of forms", form)
        pairs = []
        for target, value in zip(items[::2], items[1::2]):
            if not isinstance(target, Symbol):
                raise self.error(f"{name} can only bind symbols", target)
            pairs.append((target.name, value))
        return pairs

    def _eval_let(self, form: ListForm, scope: Scope) -> Any:
        local: Scope = ChainMap({}, scope)
        for name, value_form in self._bindings(form, "let"):
            local[name] = self.eval(value_form, local)
        return self.eval_body(form.items[2:], local)

    def _eval_for(self, form: ListForm, scope: Scope) -> List[Any]:
        pairs = self._bindings(form, "for")
        body = form.items[2:]
        results: List[Any] = []

        def walk(index: int, current: Scope) -> None:
            if index == len(pairs):
                results.append(self.eval_body(body, current))
                return
            name, coll_form = pairs[index]
            try:
                items = _seq(self.eval(coll_form, current))
            except TypeError as exc:
                raise self.error(str(exc), coll_form) from exc
            for item in items:
                walk(index + 1, ChainMap({name: item}, current))

        walk(0, scope)
        return results

    def _eval_fn(self, form: ListForm, scope: Scope) -> Lambda:
        if len(form.items) < 2 or not isinstance(form.items[1], VectorForm):
            raise self.error("fn expects a parameter vector", form)
        params: List[str] = []
        variadic: Optional[str] = None
        names = list(form.items[1].items)
        while names:
            item = names.pop(0)
            if not isinstance(item, Symbol):
                raise self.error("fn parameters must be symbols", item)
            if item.name == "&":
                if len(names) != 1 or not isinstance(names[0], Symbol):
                    raise self.error("'&' must be followed by exactly one symbol", item)
                variadic = names.pop(0).name
                continue
            params.append(item.name)
        return Lambda(self, params, variadic, form.items[2:], scope, form)

    def _eval_and(self, form: ListForm, scope: Scope) -> Any:
        result: Any = True
        for item in form.items[1:]:
            result = self.eval(item, scope)
            if not truthy(result):
                return result
        return result

    def _eval_or(self, form: ListForm, scope: Scope) -> Any:
        result: Any = None
        for item in form.items[1:]:
            result = self.eval(item, scope)
            if truthy(result):
                return result
        return result

    def _eval_quote(self, form: ListForm, scope: Scope) -> Any:
        if len(form.items) != 2:
            raise self.error("quote expects exactly one form", form)
        return _quoted(form.items[1])


def _quoted(form: Form) -> Any:
    if isinstance(form, Literal):
        return form.value
    if isinstance(form, Symbol):
        return form.name
    if isinstance(form, Quote):
        return _quoted(form.form)
    if isinstance(form, MapForm):
        return {
            (key.name if isinstance(key, Keyword) else key): value
            for key, value in zip(
                (_quoted(item) for item in form.items[::2]),
                (_quoted(item) for item in form.items[1::2]),
            )
        }
    return [_quoted(item) for item in form.items]


def _describe(form: Form) -> str:
    if isinstance(form, Symbol):
        return form.name
    if isinstance(form, Literal) and isinstance(form.value, Keyword):
        return str(form.value)
    return "expression"
