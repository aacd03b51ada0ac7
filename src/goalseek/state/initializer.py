"""Initialize the .goalseek/ directory structure."""

from pathlib import Path

from goalseek.config import config_file, goalseek_dir, logs_dir

_DEFAULT_CONFIG = """\
# goal-seek project configuration
max_iterations: 10
temperature: 0.2
model: gpt-3.5-turbo
# Non-empty list: success requires one of these to match the output
success_patterns: []
# Any match forces failure, even with a zero exit code
error_patterns:
  - error
  - Error
  - exception
  - Exception
  - failed
  - Failed
check_exit_code: true
save_history: true
history_path: .goal-seek-history
# Prefer the OPENAI_API_KEY environment variable
api_key: ""
retry_delay: 1.0
"""

_GITIGNORE = """\
logs/
session.json
PAUSE
"""


def is_initialized(project_root: Path) -> bool:
    """Check if .goalseek/ directory exists and is initialized."""
    return goalseek_dir(project_root).is_dir()


def initialize(project_root: Path) -> Path:
    """Initialize .goalseek/ directory structure.

    Returns the path to the .goalseek directory.
    """
    root = goalseek_dir(project_root)
    root.mkdir(exist_ok=True)
    logs_dir(project_root).mkdir(exist_ok=True)

    cf = config_file(project_root)
    if not cf.exists():
        cf.write_text(_DEFAULT_CONFIG)

    gitignore = root / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text(_GITIGNORE)

    return root
