"""
Runtime adapters bridging capability queries to concrete platforms.
"""

from __future__ import annotations

from .adapters import (
    BrowserAdapter,
    MediaElement,
    PlatformAdapter,
    PlatformApiError,
    ReportAdapter,
    TizenAdapter,
    adapter_for_report,
)
from .report import ProductInfoModel, RuntimeReport
from .scripted import ScriptedAdapter

__all__ = [
    "BrowserAdapter",
    "MediaElement",
    "PlatformAdapter",
    "PlatformApiError",
    "ProductInfoModel",
    "ReportAdapter",
    "RuntimeReport",
    "ScriptedAdapter",
    "TizenAdapter",
    "adapter_for_report",
]
