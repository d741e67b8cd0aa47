"""HTTP surface for the profile builder."""

from .server import create_app

__all__ = ["create_app"]
