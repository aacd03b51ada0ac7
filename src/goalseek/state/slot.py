"""The live session of a project, kept between CLI invocations."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from goalseek.config import session_file
from goalseek.domain.models import SeekSession
from goalseek.errors import PersistenceError
from goalseek.state.serialize import session_from_dict, session_to_dict

logger = logging.getLogger(__name__)


class SessionSlot:
    """Holds at most one live session in .goalseek/session.json."""

    def __init__(self, project_root: Path) -> None:
        self._path = session_file(project_root)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> SeekSession | None:
        """Load the live session, or None if the slot is empty."""
        if not self._path.exists():
            return None
        try:
            data: dict[str, Any] = json.loads(self._path.read_text(encoding="utf-8"))
            return session_from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            msg = f"Cannot load live session {self._path}: {exc}"
            raise PersistenceError(msg) from exc

    def target(self) -> Path | None:
        """Return the file the live session edits, or None if not recorded."""
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        raw = data.get("target") if isinstance(data, dict) else None
        return Path(raw) if raw else None

    def save(self, session: SeekSession, target: Path | None = None) -> None:
        """Persist the live session atomically (write to temp, then rename).

        Without a target, the previously recorded target is kept.
        """
        if target is None:
            target = self.target()
        data = session_to_dict(session)
        if target is not None:
            data["target"] = str(target)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(
                json.dumps(data, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            tmp.replace(self._path)
        except OSError as exc:
            msg = f"Cannot save live session {self._path}: {exc}"
            raise PersistenceError(msg) from exc

    def clear(self) -> None:
        """Forget the live session. Snapshots in the history are untouched."""
        self._path.unlink(missing_ok=True)
        logger.info("Cleared live session %s", self._path)
