"""Tests for snapshot store, live session slot and serialization."""

import json
from pathlib import Path

import pytest

from goalseek.domain.models import SeekSession
from goalseek.errors import PersistenceError
from goalseek.state.initializer import initialize, is_initialized
from goalseek.state.serialize import session_from_dict, session_to_dict
from goalseek.state.slot import SessionSlot
from goalseek.state.store import SnapshotStore

from fakes import make_attempt, make_session


class TestSerialize:
    def test_roundtrip(self) -> None:
        session = make_session(
            make_attempt(output="Error: a"),
            make_attempt(code="ok", output="fine", success=True, minutes=1),
        )
        loaded = session_from_dict(json.loads(json.dumps(session_to_dict(session))))
        assert loaded == session

    def test_format(self) -> None:
        data = session_to_dict(make_session(make_attempt()))
        assert data["version"] == 1
        assert data["iteration_count"] == 1
        assert data["last_successful"] is None
        assert data["attempts"][0]["timestamp"] == "2026-01-01T12:00:00+00:00"  # type: ignore[index]

    def test_missing_original_code_is_rejected(self) -> None:
        with pytest.raises(KeyError):
            session_from_dict({"attempts": []})


class TestSnapshotStore:
    def test_load_latest_empty(self, tmp_path: Path) -> None:
        assert SnapshotStore(tmp_path / "history").load_latest() is None

    def test_one_file_per_save(self, tmp_path: Path) -> None:
        store = SnapshotStore(tmp_path / "history")
        session = SeekSession(original_code="x")
        first = store.save(session)
        second = store.save(session)
        assert first != second
        assert store.list_snapshots() == [first, second]
        assert first.name.startswith("seek-state-")

    def test_load_latest_returns_newest(self, tmp_path: Path) -> None:
        store = SnapshotStore(tmp_path / "history")
        session = make_session(make_attempt())
        store.save(session)
        session.iteration_count += 1
        session.record(make_attempt(code="later", success=True))
        store.save(session)

        latest = store.load_latest()

        assert latest is not None
        assert latest.iteration_count == 2
        assert latest.last_successful is not None
        assert latest.last_successful.code == "later"

    def test_names_sort_in_save_order(self, tmp_path: Path) -> None:
        store = SnapshotStore(tmp_path / "history")
        paths = [store.save(SeekSession(original_code=str(i))) for i in range(20)]
        assert sorted(paths) == paths

    def test_corrupt_newest_snapshot_is_skipped(self, tmp_path: Path) -> None:
        store = SnapshotStore(tmp_path / "history")
        store.save(SeekSession(original_code="good"))
        newest = store.save(SeekSession(original_code="bad"))
        newest.write_text("{not json")

        latest = store.load_latest()

        assert latest is not None
        assert latest.original_code == "good"

    def test_other_files_are_ignored(self, tmp_path: Path) -> None:
        history = tmp_path / "history"
        history.mkdir()
        (history / "notes.txt").write_text("hello")
        assert SnapshotStore(history).list_snapshots() == []

    def test_save_failure_raises_persistence_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "history"
        blocker.write_text("a file, not a directory")
        with pytest.raises(PersistenceError):
            SnapshotStore(blocker).save(SeekSession(original_code="x"))


class TestSessionSlot:
    def test_empty(self, tmp_project: Path) -> None:
        slot = SessionSlot(tmp_project)
        assert not slot.exists()
        assert slot.load() is None

    def test_save_load_clear(self, tmp_project: Path) -> None:
        slot = SessionSlot(tmp_project)
        session = make_session(make_attempt())
        slot.save(session)
        assert slot.path == tmp_project / ".goalseek" / "session.json"
        assert slot.load() == session

        slot.clear()
        assert slot.load() is None

    def test_target_is_recorded_and_kept(self, tmp_project: Path) -> None:
        slot = SessionSlot(tmp_project)
        assert slot.target() is None
        target = tmp_project / "app.py"

        slot.save(make_session(), target)
        slot.save(make_session(make_attempt()))

        assert slot.target() == target
        loaded = slot.load()
        assert loaded is not None
        assert loaded.iteration_count == 1

    def test_corrupt_slot_raises(self, tmp_project: Path) -> None:
        slot = SessionSlot(tmp_project)
        slot.path.parent.mkdir(parents=True)
        slot.path.write_text("[]")
        with pytest.raises(PersistenceError):
            slot.load()


class TestInitializer:
    def test_initialize_creates_structure(self, tmp_project: Path) -> None:
        assert not is_initialized(tmp_project)
        result = initialize(tmp_project)
        assert result == tmp_project / ".goalseek"
        assert is_initialized(tmp_project)
        assert (tmp_project / ".goalseek" / "config.yaml").exists()
        assert (tmp_project / ".goalseek" / "logs").is_dir()
        assert "logs/" in (tmp_project / ".goalseek" / ".gitignore").read_text()

    def test_initialize_idempotent(self, tmp_project: Path) -> None:
        initialize(tmp_project)
        config = tmp_project / ".goalseek" / "config.yaml"
        config.write_text("max_iterations: 4\n")
        initialize(tmp_project)
        assert config.read_text() == "max_iterations: 4\n"
