"""
Build driver: render templates and tag pages and write them to the public directory.
"""

from .builder import BuildReport, SiteBuilder, install_transformers

__all__ = ["BuildReport", "SiteBuilder", "install_transformers"]
