"""goalseek.console -- terminal output for the goal-seek CLI.

Usage (any module)::

    from goalseek.console import console

    console.info("Hello")
    console.iteration_header(1, 10)

Configuration (call once in ``cli.py:main()``)::

    from goalseek.console import configure

    configure(backend="auto")  # "rich" | "plain" | "auto"
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from goalseek.console._plain import PlainBackend
from goalseek.console._rich import RichBackend

if TYPE_CHECKING:
    from goalseek.console._protocol import ConsoleProtocol

_backend: ConsoleProtocol = PlainBackend()


def configure(*, backend: str = "auto") -> None:
    """Select the console backend.

    Args:
        backend: ``"rich"`` -- always use Rich.
                 ``"plain"`` -- always use plain text.
                 ``"auto"`` (default) -- Rich when stdout is a TTY,
                 plain otherwise.
    """
    global _backend  # noqa: PLW0603

    if backend == "auto":
        backend = "rich" if sys.stdout.isatty() else "plain"

    if backend == "rich":
        _backend = RichBackend()
    else:
        _backend = PlainBackend()


def get_console() -> ConsoleProtocol:
    """Return the current backend instance."""
    return _backend


class _ConsoleProxy:
    """Delegates to the current ``_backend`` so later configure() calls apply."""

    def __getattr__(self, name: str) -> object:
        return getattr(_backend, name)


console: ConsoleProtocol = _ConsoleProxy()  # type: ignore[assignment]
