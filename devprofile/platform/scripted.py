"""
Scripted adapter for tests and offline experiments.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from .adapters import MediaElement, PlatformAdapter


class ScriptedAdapter(PlatformAdapter):
    """
    Adapter whose every answer is supplied up front.

    ``playable`` lists the MIME strings that answer ``"probably"``; everything
    else answers ``""``.  ``failures`` maps a query name (``identification``,
    ``has_global``, ``can_play_type``, ``has_media_source``, ``is_uhd_panel``)
    to the exception that query should raise.
    """

    name = "scripted"

    def __init__(
        self,
        *,
        user_agent: str = "",
        globals: Iterable[str] = (),
        playable: Iterable[str] = (),
        answers: Optional[Mapping[str, str]] = None,
        media_source: bool = False,
        uhd_panel: Optional[bool] = None,
        failures: Optional[Mapping[str, BaseException]] = None,
        query_api: bool = True,
    ) -> None:
        self.user_agent = user_agent
        self.globals = set(globals)
        self.answers: Dict[str, str] = {mime: "probably" for mime in playable}
        self.answers.update(answers or {})
        self.media_source = media_source
        self.uhd_panel = uhd_panel
        self.failures = dict(failures or {})
        self.query_api = query_api
        self.elements_created = 0
        self.queries: list[str] = []

    def _maybe_fail(self, query: str) -> None:
        failure = self.failures.get(query)
        if failure is not None:
            raise failure

    def identification(self) -> str:
        self._maybe_fail("identification")
        return self.user_agent

    def has_global(self, name: str) -> bool:
        self._maybe_fail("has_global")
        return name in self.globals

    def create_media_element(self, kind: str) -> MediaElement:
        self.elements_created += 1
        if not self.query_api:
            return MediaElement(kind)

        def can_play_type(mime: str) -> str:
            self.queries.append(mime)
            self._maybe_fail("can_play_type")
            return self.answers.get(mime, "")

        return MediaElement(kind, can_play_type)

    def has_media_source(self) -> bool:
        self._maybe_fail("has_media_source")
        return self.media_source

    def is_uhd_panel(self) -> Optional[bool]:
        self._maybe_fail("is_uhd_panel")
        return self.uhd_panel
