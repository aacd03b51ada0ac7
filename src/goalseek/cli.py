"""CLI entry point for goal-seek.

Usage:
  goalseek init
  goalseek start FILE --goal TEXT --command CMD
  goalseek pause
  goalseek resume
  goalseek reset
  goalseek status
  goalseek history [--last N]
  goalseek restore FILE
"""

from __future__ import annotations

import argparse
import asyncio
import fcntl
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC
from pathlib import Path
from typing import IO

from goalseek.attempts import error_fingerprint, success_rate
from goalseek.config import (
    GOALSEEK_DIR,
    SeekConfig,
    goalseek_dir,
    load_config,
    logs_dir,
    pause_file,
)
from goalseek.console import configure, console
from goalseek.domain.models import (
    Attempt,
    AttemptSummary,
    SeekOutcome,
    SeekSession,
)
from goalseek.domain.protocols import FixOracle
from goalseek.engine.loop import SeekEngine
from goalseek.errors import GoalSeekError, OracleError, PersistenceError
from goalseek.oracle.openai_oracle import OpenAIOracle
from goalseek.runner.shell import ShellCommandRunner
from goalseek.state.initializer import initialize, is_initialized
from goalseek.state.slot import SessionSlot
from goalseek.state.store import SnapshotStore
from goalseek.surface import FileSurface

logger = logging.getLogger(__name__)

LOCK_FILE = "seek.lock"


def _setup_logging(project_dir: Path, level: int) -> None:
    """Configure file logging to .goalseek/logs/goalseek.log."""
    log_dir = logs_dir(project_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "goalseek.log"

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


class ConsoleCallback:
    """Reports engine progress on the console."""

    def on_iteration_start(self, iteration: int, max_iterations: int) -> None:
        console.iteration_header(iteration, max_iterations)

    def on_attempt(self, iteration: int, attempt: Attempt) -> None:
        detail = "" if attempt.success else error_fingerprint(attempt.output)
        console.attempt_result(iteration, attempt.success, detail)

    def on_status_change(self, message: str) -> None:
        logger.info("Status: %s", message)

    def on_persist_error(self, error: Exception) -> None:
        console.warning(f"History not saved: {error}")


class _NoOracle:
    """Stand-in for commands that never ask for a candidate."""

    async def propose(
        self, original_code: str, goal: str, summary: AttemptSummary
    ) -> str:
        msg = "No generative service configured for this command"
        raise OracleError(msg)


def _build_engine(
    project_dir: Path,
    config: SeekConfig,
    session: SeekSession | None,
    surface: FileSurface | None = None,
    oracle: FixOracle | None = None,
) -> SeekEngine:
    # pause, resume and reset never touch the surface
    return SeekEngine(
        oracle=oracle or _NoOracle(),
        runner=ShellCommandRunner(),
        surface=surface or FileSurface(project_dir),
        store=SnapshotStore(config.history_dir(project_dir)),
        config=config,
        project_dir=project_dir,
        callback=ConsoleCallback(),
        session=session,
        pause_check=lambda: _consume_pause_marker(project_dir),
    )


def _consume_pause_marker(project_dir: Path) -> bool:
    marker = pause_file(project_dir)
    if marker.exists():
        marker.unlink(missing_ok=True)
        return True
    return False


@contextmanager
def _seek_lock(project_dir: Path) -> Iterator[IO[str] | None]:
    """Hold the exclusive seek lock. Yields None if another process holds it."""
    lock_path = goalseek_dir(project_dir) / LOCK_FILE
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock_fd = open(lock_path, "a+")  # noqa: SIM115
    try:
        try:
            fcntl.flock(lock_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            yield None
            return
        lock_fd.seek(0)
        lock_fd.truncate()
        lock_fd.write(str(os.getpid()))
        lock_fd.flush()
        try:
            yield lock_fd
        finally:
            lock_fd.truncate(0)
            lock_fd.flush()
            fcntl.flock(lock_fd, fcntl.LOCK_UN)
    finally:
        lock_fd.close()


def _running_pid(project_dir: Path) -> int | None:
    """Return the pid recorded by a live lock holder, without taking the lock."""
    lock_path = goalseek_dir(project_dir) / LOCK_FILE
    try:
        pid = int(lock_path.read_text().strip())
    except (OSError, ValueError):
        return None
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return None
    except PermissionError:
        pass  # alive, owned by another user
    return pid


def _load_live(slot: SessionSlot) -> SeekSession | None:
    """Load the live session, treating an unreadable slot as empty."""
    try:
        return slot.load()
    except PersistenceError as exc:
        logger.warning("Ignoring unreadable live session: %s", exc)
        console.warning(f"Ignoring unreadable live session: {exc}")
        return None


def _first_line(text: str, limit: int = 80) -> str:
    return error_fingerprint(text)[:limit] or "--"


# ---------------------------------------------------------------------------
# CLI commands
# ---------------------------------------------------------------------------


def cmd_init(project_dir: Path) -> int:
    """Create .goalseek/ with a default config."""
    if is_initialized(project_dir):
        console.info(f"{GOALSEEK_DIR}/ already exists; keeping existing config.")
    root = initialize(project_dir)
    console.success(f"Initialized {root}")
    return 0


def cmd_start(args: argparse.Namespace, project_dir: Path, config: SeekConfig) -> int:
    """Run the seek loop on FILE, resuming the live session if there is one."""
    target = Path(args.file)
    if not target.is_file():
        console.error(f"{target} not found.")
        return 1

    # Fails before any iteration when the credential is missing
    oracle = OpenAIOracle.from_config(config)

    with _seek_lock(project_dir) as lock:
        if lock is None:
            console.error("Another goalseek process is already running here.")
            return 1
        # A marker left behind while nothing was running is stale
        pause_file(project_dir).unlink(missing_ok=True)

        slot = SessionSlot(project_dir)
        owner = slot.target()
        if owner is not None and owner != target.resolve():
            console.error(
                f"The live session belongs to {owner}. "
                "Run 'goalseek reset' first to seek on another file."
            )
            return 1
        surface = FileSurface(target)
        engine = _build_engine(project_dir, config, slot.load(), surface, oracle)
        session = engine.begin(surface.get_current_text())
        if session.iteration_count:
            console.info(
                f"Resuming session at iteration "
                f"{session.iteration_count}/{config.max_iterations}"
            )

        try:
            result = asyncio.run(engine.run(args.goal, args.validation_command))
        except KeyboardInterrupt:
            console.warning("Interrupted.")
            engine.request_pause()
            slot.save(session, target.resolve())
            console.info("Progress saved. Run 'goalseek start' again to continue.")
            return 130

        if result.outcome is SeekOutcome.RESET:
            slot.clear()
        else:
            slot.save(result.session, target.resolve())

    return _report(result.outcome, result.iterations, result.error, result.session)


def _report(
    outcome: SeekOutcome,
    iterations: int,
    error: GoalSeekError | None,
    session: SeekSession,
) -> int:
    if outcome is SeekOutcome.SUCCEEDED:
        console.success(f"Success on iteration {iterations}!")
        return 0
    if outcome is SeekOutcome.PAUSED:
        console.info(f"Paused after {iterations} iterations. Progress saved.")
        return 0
    if outcome is SeekOutcome.RESET:
        console.info("Reset to initial state.")
        return 0
    if outcome is SeekOutcome.ABORTED:
        console.error(f"Aborted: {error}")
        return 1

    if session.attempts:
        tail = "\n".join(session.attempts[-1].output.strip().splitlines()[-15:])
        console.panel(tail or "(no output)", title="Last output", style="red")
    if session.last_successful is not None:
        console.warning("Maximum iterations reached, but a previous successful state exists.")
        console.info("goalseek restore FILE   # put the last success back")
    else:
        console.warning("Maximum iterations reached without success.")
    console.info("goalseek history        # inspect every attempt")
    return 2


def cmd_pause(project_dir: Path, config: SeekConfig) -> int:
    """Ask a running seek to pause, or snapshot the idle live session."""
    with _seek_lock(project_dir) as lock:
        if lock is None:
            pause_file(project_dir).parent.mkdir(parents=True, exist_ok=True)
            pause_file(project_dir).touch()
            console.info("Pause requested; the seek stops before its next iteration.")
            return 0

        engine = _build_engine(project_dir, config, SessionSlot(project_dir).load())
        if not engine.request_pause():
            console.info("No session to pause.")
            return 0
    console.success("Progress saved")
    return 0


def cmd_resume(project_dir: Path, config: SeekConfig) -> int:
    """Make the newest snapshot the live session."""
    with _seek_lock(project_dir) as lock:
        if lock is None:
            console.error("A seek is running; pause it before resuming.")
            return 1
        slot = SessionSlot(project_dir)
        engine = _build_engine(project_dir, config, _load_live(slot))
        session = engine.resume()
        if session is None:
            console.info("No saved history to resume from.")
            return 0
        slot.save(session)
    console.success(
        f"Resumed from last session (iteration {session.iteration_count}/"
        f"{config.max_iterations}). Run 'goalseek start' to continue."
    )
    return 0


def cmd_reset(project_dir: Path, config: SeekConfig) -> int:
    """Forget the live session; history snapshots stay on disk."""
    with _seek_lock(project_dir) as lock:
        if lock is None:
            console.error("A seek is running; pause it before resetting.")
            return 1
        slot = SessionSlot(project_dir)
        engine = _build_engine(project_dir, config, _load_live(slot))
        engine.reset()
        slot.clear()
    console.success("Reset to initial state")
    return 0


def cmd_status(project_dir: Path, config: SeekConfig) -> int:
    """Show the live session."""
    session = SessionSlot(project_dir).load()
    store = SnapshotStore(config.history_dir(project_dir))

    # Reading the pid never blocks a seek that is starting
    running = _running_pid(project_dir) is not None

    if session is None:
        console.info("No live session.")
        console.kv({"Snapshots": str(len(store.list_snapshots()))})
        return 0

    if running:
        state = "running"
    elif session.succeeded:
        state = "succeeded"
    elif session.iteration_count >= config.max_iterations:
        state = "exhausted"
    else:
        state = "idle"

    last = session.last_successful
    console.kv(
        {
            "Status": state,
            "Iterations": f"{session.iteration_count}/{config.max_iterations}",
            "Success rate": f"{success_rate(session.attempts) * 100:.1f}%",
            "Last success": (
                last.timestamp.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
                if last
                else "--"
            ),
            "Snapshots": str(len(store.list_snapshots())),
        },
        title="Live session",
    )
    return 0


def cmd_history(args: argparse.Namespace, project_dir: Path) -> int:
    """List the attempts of the live session."""
    session = SessionSlot(project_dir).load()
    if session is None or not session.attempts:
        console.info("No attempts yet.")
        return 0

    numbered = list(enumerate(session.attempts, start=1))
    if args.last:
        numbered = numbered[-args.last :]
    rows = [
        [
            str(n),
            "ok" if a.success else "FAIL",
            a.timestamp.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S"),
            _first_line(a.output),
        ]
        for n, a in numbered
    ]
    console.table(["#", "Result", "Time (UTC)", "Output"], rows, title="Attempts")
    return 0


def cmd_restore(args: argparse.Namespace, project_dir: Path, config: SeekConfig) -> int:
    """Write the last successful code into FILE."""
    session = SessionSlot(project_dir).load()
    engine = _build_engine(project_dir, config, session, FileSurface(Path(args.file)))
    if not engine.restore_last_success():
        console.warning("No successful attempt to restore.")
        return 1
    console.success(f"Restored last successful code into {args.file}")
    return 0


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="goalseek",
        description="goal-seek -- iterate on code until a command passes",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("init", help="Create .goalseek/ with a default config")

    start_p = sub.add_parser("start", help="Start or continue seeking")
    start_p.add_argument("file", help="File holding the code to change")
    start_p.add_argument("-g", "--goal", required=True, help="What the code should do")
    start_p.add_argument(
        "-c",
        "--command",
        dest="validation_command",
        required=True,
        help="Shell command that validates the code (e.g. 'pytest -q')",
    )

    sub.add_parser("pause", help="Save progress and stop before the next iteration")
    sub.add_parser("resume", help="Reload the most recent saved snapshot")
    sub.add_parser("reset", help="Discard the live session (history is kept)")
    sub.add_parser("status", help="Show the live session")

    history_p = sub.add_parser("history", help="List attempts of the live session")
    history_p.add_argument("--last", type=int, default=0, help="Show last N attempts (0=all)")

    restore_p = sub.add_parser("restore", help="Restore the last successful code")
    restore_p.add_argument("file", help="File to write the code into")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the `goalseek` command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    configure(backend="auto")

    project_dir = Path.cwd()
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    _setup_logging(project_dir, level)

    try:
        if args.command == "init":
            return cmd_init(project_dir)

        config = load_config(project_dir)
        if args.command == "start":
            return cmd_start(args, project_dir, config)
        if args.command == "pause":
            return cmd_pause(project_dir, config)
        if args.command == "resume":
            return cmd_resume(project_dir, config)
        if args.command == "reset":
            return cmd_reset(project_dir, config)
        if args.command == "status":
            return cmd_status(project_dir, config)
        if args.command == "history":
            return cmd_history(args, project_dir)
        if args.command == "restore":
            return cmd_restore(args, project_dir, config)
    except GoalSeekError as exc:
        logger.error("%s", exc)
        console.error(str(exc))
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
