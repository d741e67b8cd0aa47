"""
Pydantic schemas for the HTTP surface.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PlaybackHintsModel(BaseModel):
    is_tizen: bool = Field(alias="isTizen")
    tizen_version: float = Field(alias="tizenVersion")
    can_play_hls: bool = Field(alias="canPlayHls")
    can_play_native_hls: bool = Field(alias="canPlayNativeHls")
    use_hls_js: bool = Field(alias="useHlsJs")
    supports_hdr10: bool = Field(alias="supportsHdr10")
    supports_dolby_vision: bool = Field(alias="supportsDolbyVision")
    physical_audio_channels: int = Field(alias="physicalAudioChannels")

    model_config = ConfigDict(populate_by_name=True)


class RuntimeSummaryModel(BaseModel):
    name: str
    platform: Optional[str] = None
    user_agent: str = Field(default="", alias="userAgent")

    model_config = ConfigDict(populate_by_name=True)


class RuntimeCollection(BaseModel):
    default: str
    runtimes: List[RuntimeSummaryModel] = Field(default_factory=list)
