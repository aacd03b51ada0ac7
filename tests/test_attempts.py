"""Tests for attempt summaries."""

from goalseek.attempts import (
    LATEST_OUTPUT_CHARS,
    error_fingerprint,
    success_rate,
    summarize,
)

from fakes import make_attempt


class TestErrorFingerprint:
    def test_first_error_like_line(self) -> None:
        output = "collecting...\nFAILED test_x.py::test_add\nAssertionError: 1 != 2\n"
        assert error_fingerprint(output) == "FAILED test_x.py::test_add"

    def test_exception_line(self) -> None:
        assert error_fingerprint("ok\nRuntimeException here") == "RuntimeException here"

    def test_falls_back_to_first_non_blank_line(self) -> None:
        assert error_fingerprint("\n\n  make: *** [all] 2  \nmore") == "make: *** [all] 2"

    def test_empty_output(self) -> None:
        assert error_fingerprint("") == ""
        assert error_fingerprint("\n\n") == ""


class TestSuccessRate:
    def test_no_attempts(self) -> None:
        assert success_rate([]) == 0.0

    def test_mixed(self) -> None:
        attempts = [
            make_attempt(success=False),
            make_attempt(success=True),
            make_attempt(success=False),
            make_attempt(success=True),
        ]
        assert success_rate(attempts) == 0.5


class TestSummarize:
    def test_empty(self) -> None:
        summary = summarize([])
        assert summary.total == 0
        assert summary.recent_errors == ()
        assert summary.success_rate == 0.0
        assert summary.latest_output == ""

    def test_keeps_three_most_recent(self) -> None:
        attempts = [make_attempt(output=f"error {i}") for i in range(5)]
        summary = summarize(attempts)
        assert summary.recent_errors == ("error 2", "error 3", "error 4")
        assert summary.total == 5

    def test_rate_covers_all_attempts(self) -> None:
        attempts = [make_attempt(success=True)] + [make_attempt() for _ in range(3)]
        assert summarize(attempts).success_rate == 0.25

    def test_blank_outputs_are_skipped(self) -> None:
        attempts = [make_attempt(output=""), make_attempt(output="Error: x")]
        assert summarize(attempts).recent_errors == ("Error: x",)

    def test_window_is_taken_before_dropping_blanks(self) -> None:
        attempts = [
            make_attempt(output="Error: old"),
            make_attempt(output=""),
            make_attempt(output="Error: a"),
            make_attempt(output="Error: b"),
        ]
        assert summarize(attempts).recent_errors == ("Error: a", "Error: b")

    def test_latest_output_is_bounded(self) -> None:
        long_output = "x" * (LATEST_OUTPUT_CHARS + 500) + "END"
        summary = summarize([make_attempt(output=long_output)])
        assert len(summary.latest_output) == LATEST_OUTPUT_CHARS
        assert summary.latest_output.endswith("END")

    def test_render(self) -> None:
        attempts = [make_attempt(output="Error: one"), make_attempt(output="Error: two")]
        text = summarize(attempts).render()
        assert "- Error: one" in text
        assert "- Error: two" in text
        assert "Success rate: 0.0%" in text
        assert "Attempts so far: 2" in text
