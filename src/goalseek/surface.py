"""Editing surface backed by a single file on disk."""

from __future__ import annotations

import logging
from pathlib import Path

from goalseek.errors import SurfaceError

logger = logging.getLogger(__name__)


class FileSurface:
    """Treats one file as the opaque text buffer being fixed."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def get_current_text(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot read {self._path}: {exc}"
            raise SurfaceError(msg) from exc

    def replace_all_text(self, text: str) -> None:
        try:
            self._path.write_text(text, encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot write {self._path}: {exc}"
            raise SurfaceError(msg) from exc
        logger.debug("Wrote %d chars to %s", len(text), self._path)
