"""
FastAPI surface for the profile builder.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..config import ProfileConfig, ProfileError, UnknownRuntime
from ..context import ProfileContext
from ..platform.report import RuntimeReport
from . import schemas
from .state import ContextRegistry

LOG = logging.getLogger(__name__)


def hints_for(context: ProfileContext) -> schemas.PlaybackHintsModel:
    probe = context.probe
    return schemas.PlaybackHintsModel(
        is_tizen=probe.is_tizen(),
        tizen_version=probe.tizen_version(),
        can_play_hls=probe.can_play_hls(),
        can_play_native_hls=probe.can_play_native_hls(),
        use_hls_js=probe.should_use_hls_js(),
        supports_hdr10=probe.supports_hdr10(),
        supports_dolby_vision=probe.supports_dolby_vision(),
        physical_audio_channels=probe.physical_audio_channels(),
    )


def create_app(
    *,
    config: Optional[ProfileConfig] = None,
    registry: Optional[ContextRegistry] = None,
    lifespan: Optional[Callable[..., object]] = None,
) -> FastAPI:
    contexts = registry or ContextRegistry(config)
    profile_config = contexts.config

    app = FastAPI(title="Device Profile API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _named_context(runtime: Optional[str]) -> ProfileContext:
        try:
            return contexts.named(runtime)
        except UnknownRuntime as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ProfileError as exc:
            LOG.error("Failed to load runtime %r: %s", runtime, exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"status": "ok", "runtime": profile_config.runtime}

    @app.get("/runtimes", response_model=schemas.RuntimeCollection)
    async def list_runtimes() -> schemas.RuntimeCollection:
        try:
            runtimes = profile_config.runtimes()
        except ProfileError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return schemas.RuntimeCollection(
            default=profile_config.runtime,
            runtimes=[
                schemas.RuntimeSummaryModel(
                    name=name, platform=report.platform, user_agent=report.user_agent
                )
                for name, report in sorted(runtimes.items())
            ],
        )

    @app.get("/profile")
    async def get_profile(runtime: Optional[str] = None) -> dict:
        context = _named_context(runtime)
        return context.build().to_dict()

    @app.get("/facts")
    async def get_facts(runtime: Optional[str] = None) -> dict:
        context = _named_context(runtime)
        return context.facts().to_dict()

    @app.post("/profile")
    async def post_profile(report: RuntimeReport) -> dict:
        context = contexts.ephemeral(report)
        return context.build().to_dict()

    @app.post("/hints")
    async def post_hints(report: RuntimeReport) -> dict:
        context = contexts.ephemeral(report)
        return hints_for(context).model_dump(by_alias=True)

    return app
