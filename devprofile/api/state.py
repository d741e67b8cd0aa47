"""
Shared service state: one profile context per named runtime.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from ..config import ProfileConfig
from ..context import ProfileContext
from ..platform.adapters import adapter_for_report
from ..platform.report import RuntimeReport

LOG = logging.getLogger(__name__)


class ContextRegistry:
    """
    Keep one :class:`ProfileContext` per named runtime for the process lifetime.

    Posted reports never touch the registry; each gets a throwaway context.
    """

    def __init__(self, config: Optional[ProfileConfig] = None) -> None:
        self.config = config or ProfileConfig()
        self._lock = threading.RLock()
        self._contexts: Dict[str, ProfileContext] = {}

    def named(self, name: Optional[str] = None) -> ProfileContext:
        runtime = name or self.config.runtime
        with self._lock:
            context = self._contexts.get(runtime)
            if context is None:
                report = self.config.report(runtime)
                context = ProfileContext(adapter_for_report(report))
                self._contexts[runtime] = context
                LOG.info("Created profile context for runtime %r", runtime)
            return context

    @staticmethod
    def ephemeral(report: RuntimeReport) -> ProfileContext:
        return ProfileContext(adapter_for_report(report))
