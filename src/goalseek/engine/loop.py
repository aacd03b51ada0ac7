"""Seek loop: propose -> install -> validate -> classify -> record.

States::

    Idle -> Running -> {Succeeded, Exhausted, Aborted}
    Running -> Paused      (request_pause, observed at the top of the loop)
    Paused -> Idle         (resume reloads the newest snapshot)
    any -> Idle            (reset drops the in-memory session)

Pause and reset are cooperative. A command that is already running is
allowed to finish and is recorded; only the next iteration is suppressed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from goalseek.attempts import summarize
from goalseek.classifier import classify
from goalseek.config import SeekConfig
from goalseek.domain.models import (
    Attempt,
    CommandResult,
    SeekOutcome,
    SeekResult,
    SeekSession,
    SeekStatus,
)
from goalseek.domain.protocols import (
    CommandRunner,
    EditingSurface,
    FixOracle,
    SeekCallback,
    SessionStore,
)
from goalseek.errors import (
    GoalSeekError,
    OracleError,
    PersistenceError,
    SpawnError,
    SurfaceError,
)

logger = logging.getLogger(__name__)


class _NullCallback:
    def on_iteration_start(self, iteration: int, max_iterations: int) -> None:
        pass

    def on_attempt(self, iteration: int, attempt: Attempt) -> None:
        pass

    def on_status_change(self, message: str) -> None:
        pass

    def on_persist_error(self, error: Exception) -> None:
        pass


class SeekEngine:
    """Owns one SeekSession and drives it toward a passing command."""

    def __init__(
        self,
        oracle: FixOracle,
        runner: CommandRunner,
        surface: EditingSurface,
        store: SessionStore,
        config: SeekConfig,
        project_dir: Path,
        callback: SeekCallback | None = None,
        session: SeekSession | None = None,
        pause_check: Callable[[], bool] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._oracle = oracle
        self._runner = runner
        self._surface = surface
        self._store = store
        self._config = config
        self._project_dir = project_dir
        self._callback: SeekCallback = callback or _NullCallback()
        self._session = session
        self._pause_check = pause_check or (lambda: False)
        self._sleep = sleep
        self._status = SeekStatus.IDLE
        self._running = False
        self._pause_requested = False
        self._reset_requested = False
        if session is not None:
            self._status = self._terminal_status(session) or SeekStatus.IDLE

    @property
    def status(self) -> SeekStatus:
        return self._status

    @property
    def session(self) -> SeekSession | None:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._running

    def begin(self, original_code: str) -> SeekSession:
        """Start a session, or return the one already owned by this engine."""
        if self._session is None:
            self._session = SeekSession(original_code=original_code)
            self._status = SeekStatus.IDLE
            logger.info("Started new session (%d chars of code)", len(original_code))
        else:
            logger.info(
                "Resuming existing session at iteration %d",
                self._session.iteration_count,
            )
        return self._session

    async def run(self, goal: str, command: str) -> SeekResult:
        """Iterate until success, exhaustion, a fatal error or a pause."""
        if self._running:
            msg = "Seek loop is already running"
            raise RuntimeError(msg)

        if self._session is None:
            try:
                self.begin(self._surface.get_current_text())
            except SurfaceError as exc:
                self._status = SeekStatus.ABORTED
                return SeekResult(
                    outcome=SeekOutcome.ABORTED,
                    iterations=0,
                    session=SeekSession(original_code=""),
                    error=exc,
                )
        session = self._session
        assert session is not None

        terminal = self._terminal_status(session)
        if terminal is not None:
            self._status = terminal
            logger.info("Session already %s; nothing to do", terminal.value)
            return self._finish(session)

        self._running = True
        self._pause_requested = False
        self._reset_requested = False
        self._status = SeekStatus.RUNNING
        self._callback.on_status_change(
            f"Seeking: iteration {session.iteration_count + 1}/{self._config.max_iterations}"
        )
        try:
            return await self._loop(session, goal, command)
        finally:
            self._running = False

    async def _loop(self, session: SeekSession, goal: str, command: str) -> SeekResult:
        max_iterations = self._config.max_iterations
        while session.iteration_count < max_iterations:
            if self._reset_requested:
                self._discard()
                return SeekResult(
                    outcome=SeekOutcome.RESET,
                    iterations=session.iteration_count,
                    session=session,
                )
            if self._pause_requested or self._pause_check():
                self._pause(session)
                return SeekResult(
                    outcome=SeekOutcome.PAUSED,
                    iterations=session.iteration_count,
                    session=session,
                )

            session.iteration_count += 1
            iteration = session.iteration_count
            logger.info("Iteration %d/%d", iteration, max_iterations)
            self._callback.on_iteration_start(iteration, max_iterations)

            try:
                candidate = await self._propose(session, goal)
                self._install(candidate)
                result = await self._execute(command)
            except GoalSeekError as exc:
                # The aborted iteration does not count as an attempt
                session.iteration_count -= 1
                return self._abort(session, exc)
            except BaseException:
                session.iteration_count -= 1
                raise

            success = classify(result.output, result.exit_code, self._config)
            attempt = Attempt(code=candidate, output=result.output, success=success)
            session.record(attempt)
            logger.info(
                "Iteration %d %s (exit=%s)",
                iteration,
                "succeeded" if success else "failed",
                result.exit_code,
            )
            self._callback.on_attempt(iteration, attempt)

            if success:
                self._status = SeekStatus.SUCCEEDED
                self._callback.on_status_change(f"Success on iteration {iteration}!")
                return self._finish(session)

            if self._config.save_history:
                self._persist(session)
            if session.iteration_count < max_iterations:
                await self._sleep(self._config.retry_delay)

        self._status = SeekStatus.EXHAUSTED
        self._callback.on_status_change("Maximum iterations reached without success.")
        return self._finish(session)

    async def _propose(self, session: SeekSession, goal: str) -> str:
        summary = summarize(session.attempts)
        try:
            return await self._oracle.propose(session.original_code, goal, summary)
        except GoalSeekError:
            raise
        except Exception as exc:
            msg = f"Unexpected oracle failure: {exc}"
            raise OracleError(msg) from exc

    def _install(self, candidate: str) -> None:
        try:
            self._surface.replace_all_text(candidate)
        except GoalSeekError:
            raise
        except Exception as exc:
            msg = f"Cannot install candidate code: {exc}"
            raise SurfaceError(msg) from exc

    async def _execute(self, command: str) -> CommandResult:
        try:
            return await self._runner.execute(command, self._project_dir)
        except GoalSeekError:
            raise
        except Exception as exc:
            msg = f"Cannot run validation command: {exc}"
            raise SpawnError(msg) from exc

    def _abort(self, session: SeekSession, error: GoalSeekError) -> SeekResult:
        self._status = SeekStatus.ABORTED
        logger.error("Seek aborted: %s", error)
        self._callback.on_status_change(f"Aborted: {error}")
        return SeekResult(
            outcome=SeekOutcome.ABORTED,
            iterations=session.iteration_count,
            session=session,
            error=error,
        )

    def _finish(self, session: SeekSession) -> SeekResult:
        outcome = (
            SeekOutcome.SUCCEEDED
            if self._status is SeekStatus.SUCCEEDED
            else SeekOutcome.EXHAUSTED
        )
        return SeekResult(
            outcome=outcome,
            iterations=session.iteration_count,
            session=session,
        )

    def _terminal_status(self, session: SeekSession) -> SeekStatus | None:
        if session.succeeded:
            return SeekStatus.SUCCEEDED
        if session.iteration_count >= self._config.max_iterations:
            return SeekStatus.EXHAUSTED
        return None

    def _persist(self, session: SeekSession) -> bool:
        """Save a snapshot; failures are reported, never raised."""
        try:
            self._store.save(session)
        except PersistenceError as exc:
            logger.error("Snapshot failed: %s", exc)
            self._callback.on_persist_error(exc)
            return False
        return True

    def _pause(self, session: SeekSession) -> None:
        self._pause_requested = False
        self._persist(session)
        self._status = SeekStatus.PAUSED
        logger.info("Paused at iteration %d", session.iteration_count)
        self._callback.on_status_change("Progress saved")

    def _discard(self) -> None:
        self._reset_requested = False
        self._pause_requested = False
        self._session = None
        self._status = SeekStatus.IDLE
        logger.info("Session reset")
        self._callback.on_status_change("Reset to initial state")

    def request_pause(self) -> bool:
        """Pause the seek.

        While running, the pause takes effect at the top of the next
        iteration. Otherwise the session is saved right away. Returns
        False when there is no session to pause.
        """
        if self._running:
            self._pause_requested = True
            self._callback.on_status_change("Pause requested")
            return True
        if self._session is None:
            return False
        self._pause(self._session)
        return True

    def resume(self) -> SeekSession | None:
        """Replace the session with the newest persisted snapshot.

        Returns None, keeping the current session, when no snapshot exists.
        """
        if self._running:
            msg = "Cannot resume while the seek loop is running"
            raise RuntimeError(msg)
        loaded = self._store.load_latest()
        if loaded is None:
            logger.info("No snapshot to resume from")
            return None
        self._session = loaded
        self._status = self._terminal_status(loaded) or SeekStatus.IDLE
        logger.info("Resumed session at iteration %d", loaded.iteration_count)
        self._callback.on_status_change("Resumed from last session")
        return loaded

    def reset(self) -> None:
        """Drop the in-memory session. Persisted snapshots stay on disk."""
        if self._running:
            self._reset_requested = True
            self._callback.on_status_change("Reset requested")
            return
        self._discard()

    def restore_last_success(self) -> bool:
        """Put the last successful code back into the editing surface."""
        if self._session is None or self._session.last_successful is None:
            return False
        self._surface.replace_all_text(self._session.last_successful.code)
        logger.info("Restored last successful code")
        return True
