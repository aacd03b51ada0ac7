"""Scripted fakes and factories shared by the goal-seek tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

from goalseek.domain.models import (
    Attempt,
    AttemptSummary,
    CommandResult,
    SeekSession,
)

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class ScriptedOracle:
    """FixOracle returning scripted candidates.

    An Exception instance in the script is raised instead of returned.
    """

    def __init__(self, *replies: str | Exception) -> None:
        self._replies = list(replies)
        self.calls: list[tuple[str, str, AttemptSummary]] = []

    async def propose(
        self, original_code: str, goal: str, summary: AttemptSummary
    ) -> str:
        self.calls.append((original_code, goal, summary))
        index = min(len(self.calls), len(self._replies)) - 1
        reply = self._replies[index] if self._replies else f"candidate {len(self.calls)}"
        if isinstance(reply, Exception):
            raise reply
        return reply


class ScriptedRunner:
    """CommandRunner returning scripted results; the last one repeats."""

    def __init__(self, *results: CommandResult | Exception) -> None:
        self._results = list(results)
        self.calls: list[tuple[str, Path]] = []

    async def execute(self, command: str, cwd: Path) -> CommandResult:
        self.calls.append((command, cwd))
        result = self._results[min(len(self.calls), len(self._results)) - 1]
        if isinstance(result, Exception):
            raise result
        return result


class InMemorySurface:
    """EditingSurface holding its text in memory."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.writes: list[str] = []

    def get_current_text(self) -> str:
        return self.text

    def replace_all_text(self, text: str) -> None:
        self.text = text
        self.writes.append(text)


def failing(output: str = "Error: boom", exit_code: int | None = 1) -> CommandResult:
    return CommandResult(output=output, exit_code=exit_code)


def passing(output: str = "ok\n") -> CommandResult:
    return CommandResult(output=output, exit_code=0)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

_BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def make_attempt(
    *,
    code: str = "print('hi')",
    output: str = "Error: boom",
    success: bool = False,
    minutes: int = 0,
) -> Attempt:
    return Attempt(
        code=code,
        output=output,
        success=success,
        timestamp=_BASE_TIME + timedelta(minutes=minutes),
    )


def make_session(*attempts: Attempt, original_code: str = "x = 1\n") -> SeekSession:
    session = SeekSession(original_code=original_code)
    for attempt in attempts:
        session.iteration_count += 1
        session.record(attempt)
    return session

