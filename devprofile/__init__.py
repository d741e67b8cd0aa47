"""
Device profile builder for a TV media-playback client.

The package probes a playback runtime for codec, container and panel support
and assembles the negotiation document a media server uses to choose between
direct play, remux and transcoding.
"""

from __future__ import annotations

from .config import ProfileConfig, ProfileError, UnknownRuntime
from .context import (
    ProfileContext,
    ProfileOptions,
    build_negotiation_profile,
    get_default_context,
    reset_default_context,
)
from .document import NegotiationDocument
from .facts import CapabilityFacts

__all__ = [
    "CapabilityFacts",
    "NegotiationDocument",
    "ProfileConfig",
    "ProfileContext",
    "ProfileError",
    "ProfileOptions",
    "UnknownRuntime",
    "build_negotiation_profile",
    "get_default_context",
    "reset_default_context",
]
