"""Utility helpers for the profile builder."""

from .logging import configure_logging

__all__ = ["configure_logging"]
