"""
Capability cache owned by a profile context.

Only the HLS answer is memoised: it is established once and must stay fixed
for the rest of the session.  Everything else is cheap to recompute and is
re-queried on every build, so a slow platform API that finishes initialising
later is picked up by the next profile.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .platform.adapters import MediaElement, PlatformAdapter

LOG = logging.getLogger(__name__)


class CapabilityCache:
    """
    Holds the HLS memo and the shared video query element.

    There is no eviction; :meth:`reset` is the only way to forget an answer.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._hls_supported: Optional[bool] = None
        self._video_element: Optional[MediaElement] = None

    @property
    def hls_supported(self) -> Optional[bool]:
        return self._hls_supported

    def hls(self, compute: Callable[[], bool]) -> bool:
        cached = self._hls_supported
        if cached is not None:
            return cached
        # Concurrent first calls may both compute; the answer is identical.
        value = bool(compute())
        with self._lock:
            self._hls_supported = value
        LOG.debug("Cached HLS support: %s", value)
        return value

    def video_element(self, adapter: PlatformAdapter) -> MediaElement:
        with self._lock:
            if self._video_element is None:
                self._video_element = adapter.create_media_element("video")
            return self._video_element

    def reset(self) -> None:
        with self._lock:
            self._hls_supported = None
            self._video_element = None
