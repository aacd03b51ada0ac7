"""Core data models for goal-seek."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from goalseek.errors import GoalSeekError


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


class SeekStatus(Enum):
    """State of a SeekEngine."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"


class SeekOutcome(Enum):
    """How a call to SeekEngine.run ended."""

    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"
    PAUSED = "paused"
    RESET = "reset"


@dataclass(frozen=True)
class CommandResult:
    """Captured result of one validation command run."""

    output: str
    exit_code: int | None


@dataclass(frozen=True)
class Attempt:
    """One iteration: the candidate code, its output and its verdict."""

    code: str
    output: str
    success: bool
    timestamp: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class SuccessSnapshot:
    """Copy of the most recent successful attempt."""

    code: str
    output: str
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class SeekSession:
    """Persistent state of one seek: the unit that is saved and resumed."""

    original_code: str
    iteration_count: int = 0
    attempts: list[Attempt] = field(default_factory=lambda: list[Attempt]())
    last_successful: SuccessSnapshot | None = None

    @property
    def succeeded(self) -> bool:
        """True once any attempt has been classified as successful."""
        return self.last_successful is not None

    def is_terminal(self, max_iterations: int) -> bool:
        """Check if no further iterations may run."""
        return self.succeeded or self.iteration_count >= max_iterations

    def record(self, attempt: Attempt) -> None:
        """Append an attempt, updating last_successful on success."""
        self.attempts.append(attempt)
        if attempt.success:
            self.last_successful = SuccessSnapshot(
                code=attempt.code,
                output=attempt.output,
                timestamp=attempt.timestamp,
            )


@dataclass(frozen=True)
class AttemptSummary:
    """Bounded digest of prior attempts, handed to the oracle as context."""

    recent_errors: tuple[str, ...]
    success_rate: float
    total: int
    latest_output: str = ""

    def render(self) -> str:
        """Render the summary as prompt text."""
        lines = ["Previous attempt analysis:", "", "Common error patterns identified:"]
        if self.recent_errors:
            lines.extend(f"- {e}" for e in self.recent_errors)
        else:
            lines.append("- (none)")
        lines.append("")
        lines.append(f"Attempts so far: {self.total}")
        lines.append(f"Success rate: {self.success_rate * 100:.1f}%")
        if self.latest_output:
            lines.append("")
            lines.append("Output of the most recent attempt:")
            lines.append("```")
            lines.append(self.latest_output)
            lines.append("```")
        return "\n".join(lines)


@dataclass
class SeekResult:
    """Terminal outcome of SeekEngine.run."""

    outcome: SeekOutcome
    iterations: int
    session: SeekSession
    error: GoalSeekError | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is SeekOutcome.SUCCEEDED
