"""Utility helpers for songscroll."""

from .logging import configure_logging

__all__ = ["configure_logging"]
