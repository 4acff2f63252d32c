"""
Content transform pipeline and built-in transformers.
"""

from .pipeline import (
    Transformer,
    TransformerRegistry,
    TransformPipeline,
    add_transformer,
    default_pipeline,
    default_registry,
    override_registry,
    transform,
)
from .builtin import BUILTIN_TRANSFORMERS, external_links, markdown_blocks, markdown_to_html

__all__ = [
    "Transformer",
    "TransformerRegistry",
    "TransformPipeline",
    "add_transformer",
    "default_pipeline",
    "default_registry",
    "override_registry",
    "transform",
    "BUILTIN_TRANSFORMERS",
    "external_links",
    "markdown_blocks",
    "markdown_to_html",
]
