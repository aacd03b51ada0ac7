"""Success/failure classification of validation command output.

Rules are evaluated in order and the first that decides wins:

1. ``check_exit_code`` and a non-zero (or missing) exit code: failure.
2. Any error pattern matches the output: failure. Error patterns
   dominate a zero exit code, for tools that print errors but exit 0.
3. Success patterns configured: success iff one of them matches.
4. Otherwise: success.

Patterns are case-insensitive regular expressions taken from user
configuration. An invalid pattern is logged and skipped; a skipped
success pattern can never grant success.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from goalseek.config import SeekConfig

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        logger.warning("Skipping invalid pattern %r: %s", pattern, exc)
        return None


def compile_patterns(patterns: tuple[str, ...] | list[str]) -> list[re.Pattern[str]]:
    """Compile patterns case-insensitively, dropping invalid ones."""
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        rx = _compile(pattern)
        if rx is not None:
            compiled.append(rx)
    return compiled


def matches_any(output: str, patterns: tuple[str, ...] | list[str]) -> bool:
    """Return True if any valid pattern matches anywhere in output."""
    return any(rx.search(output) for rx in compile_patterns(patterns))


def classify(output: str, exit_code: int | None, config: SeekConfig) -> bool:
    """Decide whether a command run succeeded."""
    if config.check_exit_code and exit_code != 0:
        return False

    if matches_any(output, config.error_patterns):
        return False

    if config.success_patterns:
        return matches_any(output, config.success_patterns)

    return True
