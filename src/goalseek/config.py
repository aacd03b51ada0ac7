"""Path constants and configuration loading."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from goalseek.errors import ConfigError

logger = logging.getLogger(__name__)

# .goalseek/ directory structure
GOALSEEK_DIR = ".goalseek"
CONFIG_FILE = "config.yaml"
SESSION_FILE = "session.json"
PAUSE_FILE = "PAUSE"
LOGS_DIR = "logs"

API_KEY_ENV = "OPENAI_API_KEY"

DEFAULT_ERROR_PATTERNS = (
    "error",
    "Error",
    "exception",
    "Exception",
    "failed",
    "Failed",
)


def goalseek_dir(project_root: Path) -> Path:
    """Return the .goalseek directory path for a project."""
    return project_root / GOALSEEK_DIR


def config_file(project_root: Path) -> Path:
    """Return the config.yaml path."""
    return goalseek_dir(project_root) / CONFIG_FILE


def session_file(project_root: Path) -> Path:
    """Return the path of the live session."""
    return goalseek_dir(project_root) / SESSION_FILE


def pause_file(project_root: Path) -> Path:
    """Return the path of the pause marker."""
    return goalseek_dir(project_root) / PAUSE_FILE


def logs_dir(project_root: Path) -> Path:
    """Return the logs directory path."""
    return goalseek_dir(project_root) / LOGS_DIR


@dataclass(frozen=True)
class SeekConfig:
    """Options recognized by the seek loop, the classifier and the oracle."""

    max_iterations: int = 10
    temperature: float = 0.2
    model: str = "gpt-3.5-turbo"
    success_patterns: tuple[str, ...] = ()
    error_patterns: tuple[str, ...] = DEFAULT_ERROR_PATTERNS
    check_exit_code: bool = True
    save_history: bool = True
    history_path: str = ".goal-seek-history"
    api_key: str = field(default="", repr=False)
    retry_delay: float = 1.0
    api_base: str | None = None
    request_timeout: float = 120.0

    def history_dir(self, project_root: Path) -> Path:
        """Resolve history_path against the project root."""
        return project_root / self.history_path

    def require_api_key(self) -> str:
        """Return the API key, preferring the environment.

        Raises:
            ConfigError: If no key is configured anywhere.
        """
        key = os.environ.get(API_KEY_ENV) or self.api_key
        if not key:
            msg = (
                "OpenAI API key not found. Set api_key in "
                f"{GOALSEEK_DIR}/{CONFIG_FILE} or the {API_KEY_ENV} environment variable."
            )
            raise ConfigError(msg)
        return key


_LIST_KEYS = ("success_patterns", "error_patterns")
_BOOL_KEYS = ("check_exit_code", "save_history")
_TEXT_KEYS = ("model", "history_path")


def _coerce(data: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(SeekConfig)}
    values: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown config option %r", key)
            continue
        if key in _LIST_KEYS:
            if value is None:
                value = []
            if isinstance(value, str) or not isinstance(value, list):
                msg = f"{key} must be a list of patterns"
                raise ConfigError(msg)
            value = tuple(str(v) for v in value)
        elif key in _BOOL_KEYS and not isinstance(value, bool):
            msg = f"{key} must be true or false, not {value!r}"
            raise ConfigError(msg)
        elif key in _TEXT_KEYS and (not isinstance(value, str) or not value.strip()):
            msg = f"{key} must be a non-empty string"
            raise ConfigError(msg)
        values[key] = value

    try:
        if "max_iterations" in values:
            values["max_iterations"] = int(values["max_iterations"])
        for key in ("temperature", "retry_delay", "request_timeout"):
            if key in values:
                values[key] = float(values[key])
    except (TypeError, ValueError) as exc:
        msg = f"Invalid numeric config value: {exc}"
        raise ConfigError(msg) from exc

    if values.get("max_iterations", 1) < 1:
        msg = "max_iterations must be at least 1"
        raise ConfigError(msg)
    if values.get("api_key") is None:
        values.pop("api_key", None)
    return values


def load_config(project_root: Path) -> SeekConfig:
    """Load .goalseek/config.yaml, falling back to defaults for missing keys."""
    cf = config_file(project_root)
    if not cf.exists():
        return SeekConfig()
    try:
        data = yaml.safe_load(cf.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Cannot parse {cf}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{cf} must contain a mapping of options"
        raise ConfigError(msg)
    return SeekConfig(**_coerce(data))
