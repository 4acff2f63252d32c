"""
Markup serialization for rendered document trees.
"""

from .html import SUPPORTED_FORMATS, SerializationError, serialize, serialize_nodes

__all__ = ["SUPPORTED_FORMATS", "SerializationError", "serialize", "serialize_nodes"]
