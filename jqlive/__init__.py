"""jqlive package initialization."""

from importlib.metadata import version

__all__ = [
    "cli",
    "config",
    "core",
    "jobs",
    "syntax",
]

# Single source of truth comes from package metadata defined in pyproject.toml
__version__ = version("jqlive")
