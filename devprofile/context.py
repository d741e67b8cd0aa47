"""
Profile contexts tie an adapter, its capability cache and the probe together.

Every context is independent, so tests and the API server can hold one per
runtime without sharing cached answers.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

from .assembler import assemble
from .cache import CapabilityCache
from .config import ProfileConfig
from .document import NegotiationDocument
from .facts import CapabilityFacts
from .platform.adapters import PlatformAdapter, adapter_for_report
from .probe import CapabilityProbe

LOG = logging.getLogger(__name__)


class ProfileOptions(BaseModel):
    """
    Reserved options bag.  No key currently changes rule generation.
    """

    model_config = ConfigDict(extra="allow")


OptionsLike = Union[ProfileOptions, Mapping[str, Any], None]


def _coerce_options(options: OptionsLike) -> ProfileOptions:
    if options is None:
        return ProfileOptions()
    if isinstance(options, ProfileOptions):
        return options
    return ProfileOptions.model_validate(dict(options))


class ProfileContext:
    """
    Owns one adapter, one :class:`CapabilityCache` and the probe over both.
    """

    def __init__(self, adapter: PlatformAdapter, cache: Optional[CapabilityCache] = None) -> None:
        self.adapter = adapter
        self.cache = cache or CapabilityCache()
        self.probe = CapabilityProbe(adapter, self.cache)

    def facts(self) -> CapabilityFacts:
        return self.probe.collect()

    def build(self, options: OptionsLike = None) -> NegotiationDocument:
        resolved = _coerce_options(options)
        if resolved.model_extra:
            LOG.debug("Ignoring profile options %s", sorted(resolved.model_extra))
        return assemble(self.facts())

    def reset(self) -> None:
        self.cache.reset()


@lru_cache(maxsize=1)
def get_default_context() -> ProfileContext:
    config = ProfileConfig()
    report = config.report()
    adapter = adapter_for_report(report)
    LOG.info("Default profile context uses runtime %r (%s adapter)", config.runtime, adapter.name)
    return ProfileContext(adapter)


def reset_default_context() -> None:
    get_default_context.cache_clear()


def build_negotiation_profile(
    options: OptionsLike = None, *, context: Optional[ProfileContext] = None
) -> NegotiationDocument:
    """
    Build a fresh negotiation document for ``context`` (the default context if omitted).
    """

    target = context or get_default_context()
    return target.build(options)
