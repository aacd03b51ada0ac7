"""Shared pytest fixtures for goal-seek."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from goalseek.config import SeekConfig
from goalseek.state.store import SnapshotStore

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """An empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture()
def config() -> SeekConfig:
    """Default config with history enabled and no delay."""
    return SeekConfig(max_iterations=3, retry_delay=0.0)


@pytest.fixture()
def store(tmp_project: Path, config: SeekConfig) -> SnapshotStore:
    return SnapshotStore(config.history_dir(tmp_project))


@pytest.fixture()
def no_sleep() -> AsyncMock:
    return AsyncMock()
