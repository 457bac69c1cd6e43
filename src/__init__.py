# src/__init__.py — v1
"""classboard: AI provider orchestration for the college updates board."""

from classboard.version import __version__

__all__ = ["__version__"]
