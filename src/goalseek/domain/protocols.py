"""Protocol interfaces for goal-seek components."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from goalseek.domain.models import (
    Attempt,
    AttemptSummary,
    CommandResult,
    SeekSession,
)


class CommandRunner(Protocol):
    """Interface for running a validation command."""

    async def execute(self, command: str, cwd: Path) -> CommandResult:
        """Run a shell command in cwd and capture its combined output."""
        ...


class FixOracle(Protocol):
    """Interface for the service that proposes code fixes."""

    async def propose(
        self, original_code: str, goal: str, summary: AttemptSummary
    ) -> str:
        """Return a new code candidate."""
        ...


class EditingSurface(Protocol):
    """An opaque text buffer holding the code being worked on."""

    def get_current_text(self) -> str:
        """Return the whole buffer."""
        ...

    def replace_all_text(self, text: str) -> None:
        """Replace the whole buffer."""
        ...


class SessionStore(Protocol):
    """Interface for session snapshot persistence."""

    def save(self, session: SeekSession) -> Path:
        """Persist a new snapshot. Return its path."""
        ...

    def load_latest(self) -> SeekSession | None:
        """Load the most recent snapshot, or None if there is none."""
        ...


class SeekCallback(Protocol):
    """Callback interface for surfaces that follow a seek."""

    def on_iteration_start(self, iteration: int, max_iterations: int) -> None:
        """Called before the oracle is asked for a candidate."""
        ...

    def on_attempt(self, iteration: int, attempt: Attempt) -> None:
        """Called after an attempt has been classified and recorded."""
        ...

    def on_status_change(self, message: str) -> None:
        """Called when the engine changes state."""
        ...

    def on_persist_error(self, error: Exception) -> None:
        """Called when a snapshot could not be saved."""
        ...
