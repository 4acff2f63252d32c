"""
Configuration helpers for the inkpress site generator.
"""

from .models import ConfigError, SiteConfig, load_config
from .settings import Settings, get_settings

__all__ = ["ConfigError", "SiteConfig", "load_config", "Settings", "get_settings"]
