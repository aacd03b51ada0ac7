"""Validation command runner on top of an asyncio shell subprocess.

stdout and stderr are read independently and joined stdout-first with a
line break once the process exits. A process killed by a signal has no
exit code. Failing to start the process at all raises SpawnError,
which the engine treats as fatal rather than as a failed attempt.
"""

import asyncio
import logging
from pathlib import Path

from goalseek.domain.models import CommandResult
from goalseek.errors import SpawnError

logger = logging.getLogger(__name__)


class ShellCommandRunner:
    """Runs commands through the system shell."""

    async def execute(self, command: str, cwd: Path) -> CommandResult:
        """Run command in cwd and wait for it to finish."""
        logger.info("Running %r in %s", command, cwd)
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except OSError as exc:
            logger.error("Cannot start %r: %s", command, exc)
            msg = f"Cannot start validation command {command!r}: {exc}"
            raise SpawnError(msg) from exc

        stdout, stderr = await process.communicate()
        returncode = process.returncode
        # Negative return codes mean the process died from a signal
        exit_code = returncode if returncode is not None and returncode >= 0 else None

        output = "\n".join(
            [
                stdout.decode("utf-8", errors="replace"),
                stderr.decode("utf-8", errors="replace"),
            ]
        )
        logger.info(
            "Command finished pid=%s exit=%s output=%d chars",
            process.pid,
            exit_code,
            len(output),
        )
        return CommandResult(output=output, exit_code=exit_code)
