"""goalseek.console._protocol -- ConsoleProtocol definition.

Pure standard-library typing.Protocol for the goal-seek terminal output.
"""

from __future__ import annotations

from typing import Protocol


class ConsoleProtocol(Protocol):
    """goal-seek terminal output protocol.

    **General messages**::

        console.info("Loaded config")
        console.success("Success on iteration 2!")
        console.warning("Maximum iterations reached")
        console.error("Generative service call failed")

    **Structured panels**::

        console.panel("print('hi')", title="Last success")
        console.table(["#", "Result"], [["1", "fail"]], title="History")
        console.kv({"Status": "paused", "Iterations": "3/10"})

    **Seek lifecycle** -- used by the CLI callback::

        console.iteration_header(1, 10)
        console.attempt_result(1, False, "AssertionError: expected 3")
    """

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        """Informational message."""
        ...

    def success(self, message: str) -> None:
        """Success / positive-outcome message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message."""
        ...

    # -- Structured panels --------------------------------------------------

    def panel(self, content: str, *, title: str = "", style: str = "") -> None:
        """Display *content* in a bordered panel."""
        ...

    def table(self, headers: list[str], rows: list[list[str]], *, title: str = "") -> None:
        """Display a table with *headers* and *rows*."""
        ...

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        """Display key-value pairs."""
        ...

    # -- Seek lifecycle -----------------------------------------------------

    def iteration_header(self, current: int, total: int) -> None:
        """Display the banner at the start of an iteration."""
        ...

    def attempt_result(self, iteration: int, success: bool, detail: str) -> None:
        """Display the verdict of one attempt with a one-line detail."""
        ...
