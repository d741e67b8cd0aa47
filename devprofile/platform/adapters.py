"""
Platform adapters exposing the runtime query surface to the capability probe.

The probe never talks to a runtime directly.  Each adapter answers a small set
of typed questions (identification string, globals, media element queries,
panel class) so the probe stays identical across platforms and tests can swap
in scripted answers.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .report import RuntimeReport

LOG = logging.getLogger(__name__)

CanPlayType = Callable[[str], str]


class PlatformApiError(RuntimeError):
    """Raised by an adapter when a platform API exists but fails."""


class MediaElement:
    """
    Detached media element used purely for ``canPlayType`` style queries.

    It is never attached to a document and never loaded with media.
    """

    def __init__(self, kind: str, can_play_type: Optional[CanPlayType] = None) -> None:
        self.kind = kind
        self.can_play_type = can_play_type


class PlatformAdapter:
    """
    Base class for runtime query surfaces.

    The defaults describe a runtime that supports nothing, which is what the
    probe falls back to whenever an API is missing.
    """

    name = "generic"

    def identification(self) -> str:
        return ""

    def has_global(self, name: str) -> bool:
        return False

    def create_media_element(self, kind: str) -> MediaElement:
        return MediaElement(kind)

    def has_media_source(self) -> bool:
        return False

    def is_uhd_panel(self) -> Optional[bool]:
        """
        Return the panel class, or ``None`` when no product-info API exists.
        """

        return None


class ReportAdapter(PlatformAdapter):
    """
    Adapter answering from a :class:`RuntimeReport`.
    """

    name = "report"

    def __init__(self, report: RuntimeReport) -> None:
        self.report = report

    def identification(self) -> str:
        return self.report.user_agent

    def has_global(self, name: str) -> bool:
        return name in self.report.globals

    def create_media_element(self, kind: str) -> MediaElement:
        answers = self.report.can_play_type

        def can_play_type(mime: str) -> str:
            return answers.get(mime, "")

        return MediaElement(kind, can_play_type)

    def has_media_source(self) -> bool:
        return self.report.media_source


class BrowserAdapter(ReportAdapter):
    """Generic browser runtime. Browsers expose no product-info API."""

    name = "browser"


class TizenAdapter(ReportAdapter):
    """
    Samsung Tizen TV runtime.

    The ``tizen`` global always exists on the platform, and panel class comes
    from ``webapis.productinfo.isUdPanelSupported()``.
    """

    name = "tizen"

    def has_global(self, name: str) -> bool:
        return name == "tizen" or super().has_global(name)

    def is_uhd_panel(self) -> Optional[bool]:
        product_info = self.report.product_info
        if product_info is None:
            return None
        if product_info.error:
            raise PlatformApiError(product_info.error)
        return product_info.is_ud_panel_supported


def adapter_for_report(report: RuntimeReport) -> ReportAdapter:
    """
    Pick the adapter matching the platform a report was recorded on.
    """

    if report.platform == "tizen":
        return TizenAdapter(report)
    if report.platform is None:
        if "tizen" in report.globals or "tizen" in report.user_agent.lower():
            return TizenAdapter(report)
    elif report.platform != "browser":
        LOG.debug("Unknown platform hint %r; treating runtime as a browser", report.platform)
    return BrowserAdapter(report)
