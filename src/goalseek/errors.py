"""Error taxonomy for goal-seek.

Fatal errors stop the seek loop. A command run that completes but is
classified as unsuccessful is not an error: it is recorded as a failed
attempt. Running out of iterations is an outcome, not an exception.
"""


class GoalSeekError(Exception):
    """Base class for all goal-seek errors."""


class ConfigError(GoalSeekError):
    """Configuration is missing or malformed (e.g. no API key)."""


class SpawnError(GoalSeekError):
    """The validation command could not be started."""


class OracleError(GoalSeekError):
    """The generative service failed or returned unusable content."""


class SurfaceError(GoalSeekError):
    """The editing surface could not be read or written."""


class PersistenceError(GoalSeekError):
    """A session could not be written to or read from disk."""
