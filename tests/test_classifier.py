"""Tests for outcome classification."""

import logging

import pytest

from goalseek.classifier import classify, compile_patterns, matches_any
from goalseek.config import SeekConfig


class TestExitCode:
    def test_non_zero_exit_fails_regardless_of_patterns(self) -> None:
        config = SeekConfig(success_patterns=("All tests passed",), error_patterns=())
        assert not classify("All tests passed", 1, config)

    def test_missing_exit_code_fails(self) -> None:
        assert not classify("fine", None, SeekConfig(error_patterns=()))

    def test_exit_code_ignored_when_disabled(self) -> None:
        config = SeekConfig(check_exit_code=False, error_patterns=())
        assert classify("fine", 1, config)
        assert classify("fine", None, config)

    def test_clean_exit_without_patterns_succeeds(self) -> None:
        assert classify("3 passed\n", 0, SeekConfig())


class TestErrorPatterns:
    def test_error_pattern_dominates_zero_exit(self) -> None:
        config = SeekConfig(error_patterns=("Failed",), check_exit_code=True)
        assert not classify("1 test Failed\n", 0, config)

    def test_match_is_case_insensitive(self) -> None:
        config = SeekConfig(error_patterns=("failed",))
        assert not classify("BUILD FAILED", 0, config)

    def test_default_error_patterns(self) -> None:
        assert not classify("Traceback...\nValueError: bad", 0, SeekConfig())
        assert not classify("something raised an exception", 0, SeekConfig())

    def test_error_pattern_beats_success_pattern(self) -> None:
        config = SeekConfig(
            success_patterns=("All tests passed",), error_patterns=("warning: error",)
        )
        assert not classify("All tests passed\nwarning: error in docs", 0, config)


class TestSuccessPatterns:
    def test_success_pattern_present(self) -> None:
        config = SeekConfig(success_patterns=("All tests passed",))
        assert classify("Running...\nAll tests passed\n", 0, config)

    def test_success_pattern_absent_fails(self) -> None:
        config = SeekConfig(success_patterns=("All tests passed",))
        assert not classify("Running...\nDone\n", 0, config)

    def test_any_success_pattern_is_enough(self) -> None:
        config = SeekConfig(success_patterns=("^OK$", r"\d+ passed"))
        assert classify("12 passed in 0.3s", 0, config)


class TestInvalidPatterns:
    def test_invalid_error_pattern_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        config = SeekConfig(error_patterns=("([unclosed", "boom"))
        with caplog.at_level(logging.WARNING):
            assert classify("all good", 0, config)
            assert not classify("boom", 0, config)

    def test_invalid_success_pattern_never_grants_success(self) -> None:
        config = SeekConfig(success_patterns=("([unclosed",), error_patterns=())
        assert not classify("([unclosed", 0, config)

    def test_compile_patterns_drops_invalid(self) -> None:
        compiled = compile_patterns(["ok", "(", "done"])
        assert [rx.pattern for rx in compiled] == ["ok", "done"]

    def test_matches_any_empty(self) -> None:
        assert not matches_any("anything", ())


@pytest.mark.parametrize(
    "output,exit_code",
    [("ok", 0), ("Error", 0), ("ok", 2), ("", None)],
)
def test_classify_is_deterministic(output: str, exit_code: int | None) -> None:
    config = SeekConfig(success_patterns=("ok",))
    first = classify(output, exit_code, config)
    assert all(classify(output, exit_code, config) == first for _ in range(3))
