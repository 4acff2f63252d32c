"""
Locate and read template and layout sources on disk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..util.filesystem import read_text_file
from .errors import MissingLayoutError, MissingTemplateError

if TYPE_CHECKING:
    from ..config import SiteConfig

logger = logging.getLogger(__name__)


class TemplateLoader:
    """
    Resolve template names to files under the template and layout directories.

    Template names are paths relative to ``template_dir``; the extension is
    optional. Layout names are bare names looked up in ``layout_dir``.
    """

    def __init__(self, template_dir: Path | str, layout_dir: Path | str, extension: str = ".sx") -> None:
        self.template_dir = Path(template_dir)
        self.layout_dir = Path(layout_dir)
        self.extension = extension

    @classmethod
    def from_config(cls, config: "SiteConfig") -> "TemplateLoader":
        return cls(config.template_path, config.layout_path, config.template_extension)

    def template_path(self, name: str) -> Path:
        candidate = self.template_dir / name
        if candidate.is_file() or name.endswith(self.extension):
            return candidate
        return self.template_dir / f"{name}{self.extension}"

    def layout_path(self, name: str) -> Path:
        return self.layout_dir / f"{name}{self.extension}"

    def template_name(self, path: Path) -> str:
        """Return the name under which ``path`` is addressed (relative to the template dir)."""
        return Path(path).relative_to(self.template_dir).as_posix()

    def is_layout(self, path: Path) -> bool:
        try:
            Path(path).resolve().relative_to(self.layout_dir.resolve())
        except ValueError:
            return False
        return True

    def read_template_source(self, name: str) -> str:
        path = self.template_path(name)
        try:
            return read_text_file(path)
        except FileNotFoundError as exc:
            raise MissingTemplateError(name, str(path)) from exc

    def read_layout_source(self, name: str) -> str:
        path = self.layout_path(name)
        try:
            return read_text_file(path)
        except FileNotFoundError as exc:
            raise MissingLayoutError(name, str(path)) from exc
