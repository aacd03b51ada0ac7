"""Conversion between SeekSession and plain JSON-ready dicts."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from goalseek.domain.models import Attempt, SeekSession, SuccessSnapshot

FORMAT_VERSION = 1


def _attempt_to_dict(a: Attempt) -> dict[str, object]:
    return {
        "code": a.code,
        "output": a.output,
        "timestamp": a.timestamp.isoformat(),
        "success": a.success,
    }


def _snapshot_to_dict(s: SuccessSnapshot) -> dict[str, object]:
    return {
        "code": s.code,
        "output": s.output,
        "timestamp": s.timestamp.isoformat(),
    }


def session_to_dict(session: SeekSession) -> dict[str, object]:
    last = session.last_successful
    return {
        "version": FORMAT_VERSION,
        "iteration_count": session.iteration_count,
        "original_code": session.original_code,
        "attempts": [_attempt_to_dict(a) for a in session.attempts],
        "last_successful": _snapshot_to_dict(last) if last is not None else None,
    }


def _attempt_from_dict(d: dict[str, Any]) -> Attempt:
    return Attempt(
        code=str(d["code"]),
        output=str(d.get("output", "")),
        success=bool(d.get("success", False)),
        timestamp=datetime.fromisoformat(str(d["timestamp"])),
    )


def _snapshot_from_dict(d: dict[str, Any]) -> SuccessSnapshot:
    return SuccessSnapshot(
        code=str(d["code"]),
        output=str(d.get("output", "")),
        timestamp=datetime.fromisoformat(str(d["timestamp"])),
    )


def session_from_dict(d: dict[str, Any]) -> SeekSession:
    """Rebuild a session. Raises KeyError/ValueError on malformed data."""
    attempts_raw: list[dict[str, Any]] = d.get("attempts", [])
    last_raw: dict[str, Any] | None = d.get("last_successful")
    return SeekSession(
        original_code=str(d["original_code"]),
        iteration_count=int(d.get("iteration_count", len(attempts_raw))),
        attempts=[_attempt_from_dict(a) for a in attempts_raw],
        last_successful=_snapshot_from_dict(last_raw) if last_raw else None,
    )
