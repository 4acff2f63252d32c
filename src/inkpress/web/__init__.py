"""
Web output helpers (starter-site scaffolding).
"""

from .scaffold import ScaffoldReport, generate_site_skeleton

__all__ = ["ScaffoldReport", "generate_site_skeleton"]
