"""
Capability facts gathered from a playback runtime.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import FrozenSet, Optional, Tuple

PLATFORM_TIZEN = "tizen"
PLATFORM_BROWSER = "browser"


@dataclass(frozen=True, slots=True)
class CapabilityFacts:
    """
    Immutable snapshot of what the local playback stack can decode.

    The assembler only ever reads from one snapshot, so a profile can never
    mix answers taken at different points in time.
    """

    platform: str = PLATFORM_BROWSER
    version: float = 0.0

    h264: bool = False
    hevc: bool = False
    av1: bool = False
    vp8: bool = False
    vp9: bool = False

    ac3: bool = False
    eac3: bool = False
    dts: bool = False
    audio_formats: FrozenSet[str] = field(default_factory=frozenset)

    mkv: bool = False
    ts: bool = False
    hls: bool = False
    native_hls_fmp4: bool = False

    hdr10: bool = False
    hlg: bool = False
    dolby_vision: bool = False

    max_h264_level: int = 42
    max_hevc_level: int = 120
    hevc_profiles: Tuple[str, ...] = ("main",)
    audio_channels: int = 2
    max_video_bitrate: Optional[int] = None

    @property
    def is_tv(self) -> bool:
        return self.platform == PLATFORM_TIZEN

    def can_play_audio(self, fmt: str) -> bool:
        return fmt in self.audio_formats

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload["audio_formats"] = sorted(self.audio_formats)
        payload["hevc_profiles"] = list(self.hevc_profiles)
        return payload
