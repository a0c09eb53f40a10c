"""
Error types shared across the package.
"""

from __future__ import annotations


class ScrollError(RuntimeError):
    """Base class for scroll engine related errors."""


class InvalidCommand(ScrollError):
    """Raised when an unsupported command is requested."""
