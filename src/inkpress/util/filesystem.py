"""
Filesystem helpers shared by the template loader and the site builder.
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import List

from filelock import FileLock

logger = logging.getLogger(__name__)


def _ensure_parent(target: Path) -> None:
    """Ensure the parent directory for target exists."""
    if target.parent and not target.parent.exists():
        target.parent.mkdir(parents=True, exist_ok=True)


def list_files(directory: Path | str, extension: str) -> List[Path]:
    """
    Recursively list files under directory whose name ends with extension.

    Hidden files and directories (leading dot) are skipped. The result is
    sorted so that builds are deterministic.
    """
    root = Path(directory)
    if not root.is_dir():
        logger.debug("Directory %s does not exist; no files listed", root)
        return []
    found = []
    for path in root.rglob(f"*{extension}"):
        relative = path.relative_to(root)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if path.is_file():
            found.append(path)
    return sorted(found)


def read_text_file(path: Path | str, encoding: str = "utf-8") -> str:
    """Read a text file; raises FileNotFoundError when it is absent."""
    return Path(path).read_text(encoding=encoding)


@contextmanager
def file_lock(path: Path | str):
    """Context manager for a filesystem lock file alongside the target."""
    target = Path(path).expanduser().resolve()
    lock_path = target.with_suffix(f"{target.suffix}.lock")
    _ensure_parent(lock_path)
    with FileLock(str(lock_path)):
        yield


def _atomic_write_text(target: Path, content: str, encoding: str) -> None:
    """Write text atomically by staging a temp file and renaming."""
    _ensure_parent(target)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding) as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    finally:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass


def write_text_file(path: Path | str, content: str, encoding: str = "utf-8", *, lock: bool = True) -> Path:
    """
    Write text to a file, overwriting it and creating parent directories as needed.
    """
    target = Path(path).expanduser().resolve()
    if lock:
        with file_lock(target):
            _atomic_write_text(target, content, encoding=encoding)
    else:
        _atomic_write_text(target, content, encoding=encoding)
    logger.debug("Wrote %d characters to %s", len(content), target)
    return target
