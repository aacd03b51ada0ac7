"""goal-seek: iterate on code with a language model until a command passes."""

__version__ = "0.1.0"
