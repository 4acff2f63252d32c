"""
Pydantic models for validating and hashing site configuration files.
"""

from __future__ import annotations

import hashlib
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_CONFIG_NAME = "site.toml"


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


class SiteConfig(BaseModel):
    """
    Top-level configuration for a site.

    Attributes:
        root: Directory that relative paths are resolved against (the config file's folder).
        template_dir: Directory holding page templates.
        layout_dir: Layout directory, relative to ``template_dir``.
        post_dir: Post directory, relative to ``template_dir``.
        public_dir: Directory where rendered pages are written.
        template_extension: Filename suffix of template sources.
        tag_layout: Layout name used to render tag index pages.
        tag_dir: Output sub-directory (under ``public_dir``) for tag pages.
        post_url_format: Format string for post URLs (``year``, ``month``, ``day``, ``slug``).
        lang: Document language used by the html5/xhtml serializers.
        transformers: Names of built-in content transformers, applied in order.
        site: Free-form site data exposed to templates as ``site``.
    """
    root: Path = Field(default_factory=Path.cwd)
    template_dir: Path = Path("template")
    layout_dir: Path = Path("_layouts")
    post_dir: Path = Path("_posts")
    public_dir: Path = Path("public")
    template_extension: str = ".sx"
    tag_layout: str = "tag"
    tag_dir: str = "tag"
    post_url_format: str = "{year}/{month}/{slug}"
    lang: str = "en"
    transformers: List[str] = Field(default_factory=list)
    site: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
    }

    @field_validator("template_extension")
    @classmethod
    def _check_extension(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError("template_extension must look like '.sx'")
        return value

    @field_validator("transformers")
    @classmethod
    def _check_transformers(cls, value: List[str]) -> List[str]:
        from ..transform import BUILTIN_TRANSFORMERS

        unknown = [name for name in value if name not in BUILTIN_TRANSFORMERS]
        if unknown:
            known = ", ".join(sorted(BUILTIN_TRANSFORMERS))
            raise ValueError(f"unknown transformers {unknown}; available: {known}")
        return value

    @field_validator("post_url_format")
    @classmethod
    def _check_post_url_format(cls, value: str) -> str:
        try:
            value.format(year="2000", month="01", day="01", slug="post")
        except (KeyError, IndexError, ValueError) as exc:
            raise ValueError(f"post_url_format may only use year, month, day and slug ({exc})") from exc
        return value

    def _resolve(self, path: Path) -> Path:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = Path(self.root) / candidate
        return candidate.resolve()

    @property
    def template_path(self) -> Path:
        return self._resolve(self.template_dir)

    @property
    def layout_path(self) -> Path:
        return self.template_path / self.layout_dir

    @property
    def post_path(self) -> Path:
        return self.template_path / self.post_dir

    @property
    def public_path(self) -> Path:
        return self._resolve(self.public_dir)

    @property
    def hash(self) -> str:
        """
        Deterministic hash of the normalized config, used to detect changes.
        """
        payload = self.model_dump(mode="json", round_trip=True, exclude={"root"})
        blob = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
        return hashlib.sha256(blob).hexdigest()


def load_config(path: Path | str) -> SiteConfig:
    """
    Load and validate a TOML config file into a SiteConfig instance.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        A validated SiteConfig whose relative paths resolve against the file's directory.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("rb") as handle:
            raw_data: Dict[str, Any] = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in configuration file: {exc}") from exc

    if "root" in raw_data:
        raise ConfigError("'root' is derived from the config location and cannot be set.")
    raw_data["root"] = config_path.parent

    try:
        return SiteConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
