"""Session snapshots: one timestamp-named JSON file per save.

Snapshots are never overwritten or pruned, so a run's history survives
crashes. File names sort lexically in save order.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any

from goalseek.domain.models import SeekSession
from goalseek.errors import PersistenceError
from goalseek.state.serialize import session_from_dict, session_to_dict

logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX = "seek-state-"
SNAPSHOT_SUFFIX = ".json"


def _snapshot_name(stamp_ns: int) -> str:
    # Fixed width keeps lexical order equal to numeric order
    return f"{SNAPSHOT_PREFIX}{stamp_ns:020d}{SNAPSHOT_SUFFIX}"


class SnapshotStore:
    """Persists SeekSession snapshots under a history directory."""

    def __init__(self, history_dir: Path) -> None:
        self._dir = history_dir
        self._last_ns = 0

    @property
    def history_dir(self) -> Path:
        return self._dir

    def list_snapshots(self) -> list[Path]:
        """Return snapshot paths, oldest first."""
        if not self._dir.is_dir():
            return []
        return sorted(
            p
            for p in self._dir.iterdir()
            if p.name.startswith(SNAPSHOT_PREFIX) and p.name.endswith(SNAPSHOT_SUFFIX)
        )

    def save(self, session: SeekSession) -> Path:
        """Write a new snapshot and return its path."""
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            stamp = max(time.time_ns(), self._last_ns + 1)
            path = self._dir / _snapshot_name(stamp)
            while path.exists():
                stamp += 1
                path = self._dir / _snapshot_name(stamp)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(
                json.dumps(session_to_dict(session), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            tmp.rename(path)
        except OSError as exc:
            msg = f"Cannot save snapshot to {self._dir}: {exc}"
            raise PersistenceError(msg) from exc
        self._last_ns = stamp
        logger.info(
            "Saved snapshot %s (iteration %d)", path.name, session.iteration_count
        )
        return path

    def load(self, path: Path) -> SeekSession:
        """Load one snapshot file."""
        try:
            data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
            return session_from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            msg = f"Cannot load snapshot {path.name}: {exc}"
            raise PersistenceError(msg) from exc

    def load_latest(self) -> SeekSession | None:
        """Load the newest readable snapshot, or None if there is none."""
        for path in reversed(self.list_snapshots()):
            try:
                session = self.load(path)
            except PersistenceError as exc:
                logger.warning("Skipping unreadable snapshot: %s", exc)
                continue
            logger.info("Loaded snapshot %s", path.name)
            return session
        return None
