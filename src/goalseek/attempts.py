"""Summaries of prior attempts, used as context for the next oracle call.

Nothing here feeds the loop's continue/stop decision.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from goalseek.domain.models import Attempt, AttemptSummary

SUMMARY_WINDOW = 3
LATEST_OUTPUT_CHARS = 2000

_ERROR_LINE = re.compile(r"error|failed|exception", re.IGNORECASE)


def error_fingerprint(output: str) -> str:
    """Return a one-line fingerprint of a command's output.

    The first line that looks like an error, else the first non-blank
    line, else an empty string.
    """
    lines = [line.strip() for line in output.splitlines()]
    for line in lines:
        if _ERROR_LINE.search(line):
            return line
    for line in lines:
        if line:
            return line
    return ""


def success_rate(attempts: Sequence[Attempt]) -> float:
    """Fraction of attempts classified as successful (0.0 when empty)."""
    if not attempts:
        return 0.0
    return sum(1 for a in attempts if a.success) / len(attempts)


def summarize(attempts: Sequence[Attempt], window: int = SUMMARY_WINDOW) -> AttemptSummary:
    """Build the bounded summary handed to the oracle."""
    recent = attempts[-window:] if window > 0 else []
    fingerprints = tuple(fp for fp in (error_fingerprint(a.output) for a in recent) if fp)
    latest = attempts[-1].output.strip()[-LATEST_OUTPUT_CHARS:] if attempts else ""
    return AttemptSummary(
        recent_errors=fingerprints,
        success_rate=success_rate(attempts),
        total=len(attempts),
        latest_output=latest,
    )
