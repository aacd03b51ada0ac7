"""Tests for the shell command runner (spawns real processes)."""

from pathlib import Path

import pytest

from goalseek.errors import SpawnError
from goalseek.runner.shell import ShellCommandRunner


class TestShellCommandRunner:
    async def test_captures_stdout_then_stderr(self, tmp_path: Path) -> None:
        result = await ShellCommandRunner().execute("echo out; echo err >&2", tmp_path)
        assert result.exit_code == 0
        assert result.output == "out\n\nerr\n"

    async def test_non_zero_exit(self, tmp_path: Path) -> None:
        result = await ShellCommandRunner().execute("echo nope; exit 3", tmp_path)
        assert result.exit_code == 3
        assert result.output.startswith("nope")

    async def test_runs_in_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("here")
        result = await ShellCommandRunner().execute("cat marker.txt", tmp_path)
        assert result.output.startswith("here")

    async def test_killed_by_signal_has_no_exit_code(self, tmp_path: Path) -> None:
        result = await ShellCommandRunner().execute("kill -9 $$", tmp_path)
        assert result.exit_code is None

    async def test_unknown_command_is_a_normal_failure(self, tmp_path: Path) -> None:
        # the shell starts fine and reports the missing command itself
        result = await ShellCommandRunner().execute("definitely-not-a-command-xyz", tmp_path)
        assert result.exit_code == 127

    async def test_missing_cwd_raises_spawn_error(self, tmp_path: Path) -> None:
        with pytest.raises(SpawnError):
            await ShellCommandRunner().execute("echo hi", tmp_path / "missing")

    async def test_undecodable_output_is_replaced(self, tmp_path: Path) -> None:
        result = await ShellCommandRunner().execute(r"printf '\377ok'", tmp_path)
        assert result.output.startswith("�ok")
