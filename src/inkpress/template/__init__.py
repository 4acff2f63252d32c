"""
Template engine: option headers, the s-expression reader/evaluator, layouts.
"""

from .errors import (
    LayoutCycleError,
    MissingLayoutError,
    MissingTemplateError,
    TemplateCompileError,
    TemplateError,
    TemplateEvaluationError,
    TemplateSyntaxError,
)
from .nodes import Document, Keyword, Node
from .options import DocumentOptions, TagRef, parse_options
from .loader import TemplateLoader
from .compiler import Renderer, TemplateCompiler
from .layout import LayoutResolver

__all__ = [
    "LayoutCycleError",
    "MissingLayoutError",
    "MissingTemplateError",
    "TemplateCompileError",
    "TemplateError",
    "TemplateEvaluationError",
    "TemplateSyntaxError",
    "Document",
    "Keyword",
    "Node",
    "DocumentOptions",
    "TagRef",
    "parse_options",
    "TemplateLoader",
    "Renderer",
    "TemplateCompiler",
    "LayoutResolver",
]
