"""
Platform capability probe.

Each query turns runtime answers into a primitive fact.  Platforms whose
``canPlayType`` is known to under-report short-circuit with a fixed answer,
and every query is guarded so a missing or throwing API degrades to
"capability absent" instead of reaching the caller.
"""

from __future__ import annotations

import functools
import logging
import re
from typing import Any, Callable, Mapping, Optional, Tuple, TypeVar

from .cache import CapabilityCache
from .facts import PLATFORM_BROWSER, PLATFORM_TIZEN, CapabilityFacts
from .platform.adapters import MediaElement, PlatformAdapter

LOG = logging.getLogger(__name__)

T = TypeVar("T")

TIZEN_VERSION_RE = re.compile(r"Tizen\s+(\d+)\.(\d+)", re.IGNORECASE)
DEFAULT_TIZEN_VERSION = 4.0
AV1_HARDWARE_VERSION = 5.5
DTS_DROPPED_VERSION = 4.0
NATIVE_HLS_FMP4_VERSION = 5.0
H264_LEVEL_52_VERSION = 5.0

# Panels below 4K choke on high bitrate streams.
FHD_MAX_VIDEO_BITRATE = 20_000_000

PROBED_AUDIO_FORMATS = ("mp3", "aac", "flac", "wav", "ogg", "opus")
TIZEN_NATIVE_AUDIO_FORMATS = frozenset({"flac", "asf", "wma"})
AUDIO_TYPE_STRINGS: Mapping[str, str] = {
    "opus": 'audio/ogg; codecs="opus"',
    "webma": "audio/webm",
    "mp3": "audio/mpeg",
    "aac": 'audio/mp4; codecs="mp4a.40.2"',
    "flac": "audio/flac",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
}


def _guarded(default: T) -> Callable[[Callable[..., T]], Callable[..., T]]:
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(self: "CapabilityProbe", *args: Any, **kwargs: Any) -> T:
            try:
                return func(self, *args, **kwargs)
            except Exception:
                LOG.warning(
                    "Capability query %s failed; assuming %r", func.__name__, default, exc_info=True
                )
                return default

        return wrapper

    return decorator


def is_playable_answer(answer: Optional[str]) -> bool:
    """
    ``canPlayType`` answers ``""``, ``"no"``, ``"maybe"`` or ``"probably"``.
    """

    if not answer:
        return False
    return bool(str(answer).replace("no", "", 1))


def cross_origin_value(media_source: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    CORS mode for the playback element; remote sources must not send it.
    """

    if media_source and media_source.get("IsRemote"):
        return None
    return "anonymous"


class CapabilityProbe:
    """
    Query the runtime behind ``adapter`` for codec, container and panel facts.
    """

    def __init__(self, adapter: PlatformAdapter, cache: Optional[CapabilityCache] = None) -> None:
        self.adapter = adapter
        self.cache = cache or CapabilityCache()
        self._pinned: Optional[Tuple[bool, float]] = None

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def _video(self) -> MediaElement:
        return self.cache.video_element(self.adapter)

    @staticmethod
    def _can_play(element: MediaElement, mime: str) -> bool:
        if element.can_play_type is None:
            return False
        try:
            answer = element.can_play_type(mime)
        except Exception:
            LOG.warning("canPlayType(%r) failed; treating as unsupported", mime, exc_info=True)
            return False
        return is_playable_answer(answer)

    def _any(self, *mimes: str) -> bool:
        element = self._video()
        return any(self._can_play(element, mime) for mime in mimes)

    def _all(self, *mimes: str) -> bool:
        element = self._video()
        return all(self._can_play(element, mime) for mime in mimes)

    # ------------------------------------------------------------------
    # Platform identification
    # ------------------------------------------------------------------
    @_guarded(False)
    def is_tizen(self) -> bool:
        if self._pinned is not None:
            return self._pinned[0]
        if self.adapter.has_global("tizen"):
            return True
        return "tizen" in self.adapter.identification().lower()

    def tizen_version(self) -> float:
        if self._pinned is not None:
            return self._pinned[1]
        if not self.is_tizen():
            return 0.0
        try:
            identification = self.adapter.identification()
        except Exception as exc:
            LOG.info("Could not read platform identification: %s", exc)
            return DEFAULT_TIZEN_VERSION
        match = TIZEN_VERSION_RE.search(identification or "")
        if match:
            return int(match.group(1)) + int(match.group(2)) / 10
        return DEFAULT_TIZEN_VERSION

    # ------------------------------------------------------------------
    # Video codecs
    # ------------------------------------------------------------------
    @_guarded(False)
    def can_play_h264(self) -> bool:
        return self._any('video/mp4; codecs="avc1.42E01E, mp4a.40.2"')

    @_guarded(False)
    def can_play_hevc(self) -> bool:
        if self.is_tizen():
            return True
        return self._any(
            'video/mp4; codecs="hvc1.1.L120"',
            'video/mp4; codecs="hev1.1.L120"',
            'video/mp4; codecs="hvc1.1.0.L120"',
            'video/mp4; codecs="hev1.1.0.L120"',
        )

    @_guarded(False)
    def can_play_av1(self) -> bool:
        if self.tizen_version() >= AV1_HARDWARE_VERSION:
            return True
        return self._all(
            'video/mp4; codecs="av01.0.15M.08"',
            'video/mp4; codecs="av01.0.15M.10"',
        )

    @_guarded(False)
    def can_play_vp8(self) -> bool:
        return self._any('video/webm; codecs="vp8"')

    @_guarded(False)
    def can_play_vp9(self) -> bool:
        return self._any('video/webm; codecs="vp9"')

    # ------------------------------------------------------------------
    # Audio codecs
    # ------------------------------------------------------------------
    @_guarded(False)
    def supports_ac3(self) -> bool:
        if self.is_tizen():
            return True
        return self._any('audio/mp4; codecs="ac-3"')

    @_guarded(False)
    def supports_eac3(self) -> bool:
        if self.is_tizen():
            return True
        return self._any('audio/mp4; codecs="ec-3"')

    @_guarded(False)
    def can_play_dts(self) -> bool:
        # Samsung dropped DTS from 2018 models onwards.
        if self.tizen_version() >= DTS_DROPPED_VERSION:
            return False
        return self._any('video/mp4; codecs="dts-"', 'video/mp4; codecs="dts+"')

    @_guarded(False)
    def can_play_audio_format(self, fmt: str) -> bool:
        if self.is_tizen() and fmt in TIZEN_NATIVE_AUDIO_FORMATS:
            return True
        type_string = AUDIO_TYPE_STRINGS.get(fmt)
        if not type_string:
            return False
        element = self.adapter.create_media_element("audio")
        return self._can_play(element, type_string)

    # ------------------------------------------------------------------
    # Containers and delivery
    # ------------------------------------------------------------------
    @_guarded(False)
    def can_play_mkv(self) -> bool:
        if self.is_tizen():
            return True
        return self._any("video/x-matroska", "video/mkv")

    @_guarded(False)
    def can_play_ts(self) -> bool:
        return self.is_tizen()

    @_guarded(False)
    def can_play_native_hls(self) -> bool:
        if self.is_tizen():
            return True
        return self._any("application/x-mpegURL", "application/vnd.apple.mpegURL")

    @_guarded(False)
    def can_play_hls_with_mse(self) -> bool:
        return self.adapter.has_media_source()

    def can_play_hls(self) -> bool:
        return self.cache.hls(lambda: self.can_play_native_hls() or self.can_play_hls_with_mse())

    @_guarded(False)
    def can_play_native_hls_in_fmp4(self) -> bool:
        return self.tizen_version() >= NATIVE_HLS_FMP4_VERSION

    @_guarded(False)
    def should_use_hls_js(self) -> bool:
        # Tizen's native player handles seeking in live streams.
        if self.is_tizen():
            return False
        return self.can_play_hls_with_mse() and not self.can_play_native_hls()

    # ------------------------------------------------------------------
    # Dynamic range
    # ------------------------------------------------------------------
    @_guarded(False)
    def supports_hdr10(self) -> bool:
        return self.is_tizen()

    def supports_hlg(self) -> bool:
        return self.supports_hdr10()

    def supports_dolby_vision(self) -> bool:
        return False

    # ------------------------------------------------------------------
    # Numeric ceilings
    # ------------------------------------------------------------------
    @_guarded(42)
    def max_h264_level(self) -> int:
        if self.tizen_version() >= H264_LEVEL_52_VERSION:
            return 52
        if self.is_tizen():
            return 51
        if self._any('video/mp4; codecs="avc1.640833"'):
            return 51
        return 42

    @_guarded(120)
    def max_hevc_level(self) -> int:
        for level in (186, 183, 153):
            if self._any(f'video/mp4; codecs="hvc1.2.4.L{level}"'):
                return level
        if self.is_tizen():
            return 153
        return 120

    @_guarded(("main",))
    def hevc_profiles(self) -> Tuple[str, ...]:
        main10 = self._any('video/mp4; codecs="hvc1.2.4.L123"', 'video/mp4; codecs="hev1.2.4.L123"')
        if main10 or self.is_tizen():
            return ("main", "main 10")
        return ("main",)

    @_guarded(2)
    def physical_audio_channels(self) -> int:
        return 6 if self.is_tizen() else 2

    def global_max_video_bitrate(self) -> Optional[int]:
        if not self.is_tizen():
            return None
        try:
            is_uhd = self.adapter.is_uhd_panel()
        except Exception as exc:
            LOG.info("Could not detect panel type: %s", exc)
            return None
        if is_uhd is False:
            return FHD_MAX_VIDEO_BITRATE
        return None

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------
    def collect(self) -> CapabilityFacts:
        """
        Run every query once and freeze the answers.
        """

        tizen = self.is_tizen()
        version = self.tizen_version()
        self._pinned = (tizen, version)
        try:
            facts = self._snapshot(tizen, version)
        finally:
            self._pinned = None
        LOG.debug("Collected capability facts: %s", facts)
        return facts

    def _snapshot(self, tizen: bool, version: float) -> CapabilityFacts:
        return CapabilityFacts(
            platform=PLATFORM_TIZEN if tizen else PLATFORM_BROWSER,
            version=version,
            h264=self.can_play_h264(),
            hevc=self.can_play_hevc(),
            av1=self.can_play_av1(),
            vp8=self.can_play_vp8(),
            vp9=self.can_play_vp9(),
            ac3=self.supports_ac3(),
            eac3=self.supports_eac3(),
            dts=self.can_play_dts(),
            audio_formats=frozenset(
                fmt for fmt in PROBED_AUDIO_FORMATS if self.can_play_audio_format(fmt)
            ),
            mkv=self.can_play_mkv(),
            ts=self.can_play_ts(),
            hls=self.can_play_hls(),
            native_hls_fmp4=self.can_play_native_hls_in_fmp4(),
            hdr10=self.supports_hdr10(),
            hlg=self.supports_hlg(),
            dolby_vision=self.supports_dolby_vision(),
            max_h264_level=self.max_h264_level(),
            max_hevc_level=self.max_hevc_level(),
            hevc_profiles=self.hevc_profiles(),
            audio_channels=self.physical_audio_channels(),
            max_video_bitrate=self.global_max_video_bitrate(),
        )
