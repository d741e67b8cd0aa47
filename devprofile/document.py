"""
Pydantic schemas mirroring the negotiation document the media server parses.

Field aliases are the server's wire names and must not change without a
matching server-side change.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, validator

MAX_STREAMING_BITRATE = 120_000_000
MAX_STATIC_BITRATE = 100_000_000
MUSIC_STREAMING_TRANSCODING_BITRATE = 384_000


class MediaType(str, Enum):
    VIDEO = "Video"
    AUDIO = "Audio"
    VIDEO_AUDIO = "VideoAudio"


class ConditionOperator(str, Enum):
    LESS_THAN_EQUAL = "LessThanEqual"
    EQUALS_ANY = "EqualsAny"


class DeliveryProtocol(str, Enum):
    HTTP = "http"
    HLS = "hls"


class SubtitleMethod(str, Enum):
    EXTERNAL = "External"
    ENCODE = "Encode"


def _join(value: Any, separator: str) -> Any:
    if isinstance(value, (list, tuple)):
        return separator.join(str(item) for item in value)
    return value


def _as_decimal(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("expected a number, not a boolean")
    if isinstance(value, int):
        return str(value)
    return value


class _Rule(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Condition(_Rule):
    condition: ConditionOperator = Field(alias="Condition")
    property_name: str = Field(alias="Property")
    value: str = Field(alias="Value")
    is_required: bool = Field(default=False, alias="IsRequired")

    @validator("value", pre=True)
    def _normalise_value(cls, value: Any) -> Any:
        return _as_decimal(_join(value, "|"))

    @property
    def values(self) -> Tuple[str, ...]:
        return tuple(self.value.split("|"))


class DirectPlayRule(_Rule):
    container: str = Field(alias="Container")
    type: MediaType = Field(alias="Type")
    video_codec: Optional[str] = Field(default=None, alias="VideoCodec")
    audio_codec: Optional[str] = Field(default=None, alias="AudioCodec")

    @validator("container", "video_codec", "audio_codec", pre=True)
    def _join_codecs(cls, value: Any) -> Any:
        return _join(value, ",")


class TranscodingRule(_Rule):
    container: str = Field(alias="Container")
    type: MediaType = Field(alias="Type")
    audio_codec: Optional[str] = Field(default=None, alias="AudioCodec")
    video_codec: Optional[str] = Field(default=None, alias="VideoCodec")
    context: str = Field(default="Streaming", alias="Context")
    protocol: DeliveryProtocol = Field(alias="Protocol")
    max_audio_channels: Optional[str] = Field(default=None, alias="MaxAudioChannels")
    min_segments: Optional[str] = Field(default=None, alias="MinSegments")
    break_on_non_key_frames: Optional[bool] = Field(default=None, alias="BreakOnNonKeyFrames")

    @validator("audio_codec", "video_codec", pre=True)
    def _join_codecs(cls, value: Any) -> Any:
        return _join(value, ",")

    @validator("max_audio_channels", "min_segments", pre=True)
    def _stringify(cls, value: Any) -> Any:
        return _as_decimal(value)


class ContainerRule(_Rule):
    type: MediaType = Field(alias="Type")
    conditions: Tuple[Condition, ...] = Field(default=(), alias="Conditions")


class CodecRule(_Rule):
    type: MediaType = Field(alias="Type")
    codec: Optional[str] = Field(default=None, alias="Codec")
    conditions: Tuple[Condition, ...] = Field(default=(), alias="Conditions")

    def condition_for(self, property_name: str) -> Optional[Condition]:
        for condition in self.conditions:
            if condition.property_name == property_name:
                return condition
        return None


class SubtitleRule(_Rule):
    format: str = Field(alias="Format")
    method: SubtitleMethod = Field(alias="Method")


class ResponseShapeRule(_Rule):
    type: MediaType = Field(alias="Type")
    container: str = Field(alias="Container")
    mime_type: str = Field(alias="MimeType")


class NegotiationDocument(_Rule):
    max_streaming_bitrate: int = Field(default=MAX_STREAMING_BITRATE, alias="MaxStreamingBitrate")
    max_static_bitrate: int = Field(default=MAX_STATIC_BITRATE, alias="MaxStaticBitrate")
    music_streaming_transcoding_bitrate: int = Field(
        default=MUSIC_STREAMING_TRANSCODING_BITRATE, alias="MusicStreamingTranscodingBitrate"
    )
    direct_play_profiles: Tuple[DirectPlayRule, ...] = Field(default=(), alias="DirectPlayProfiles")
    transcoding_profiles: Tuple[TranscodingRule, ...] = Field(default=(), alias="TranscodingProfiles")
    container_profiles: Tuple[ContainerRule, ...] = Field(default=(), alias="ContainerProfiles")
    codec_profiles: Tuple[CodecRule, ...] = Field(default=(), alias="CodecProfiles")
    subtitle_profiles: Tuple[SubtitleRule, ...] = Field(default=(), alias="SubtitleProfiles")
    response_profiles: Tuple[ResponseShapeRule, ...] = Field(default=(), alias="ResponseProfiles")

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    def codec_rule(self, codec: Optional[str], type: MediaType = MediaType.VIDEO) -> Optional[CodecRule]:
        for rule in self.codec_profiles:
            if rule.codec == codec and rule.type == type:
                return rule
        return None

    def direct_play_rule(self, container: str) -> Optional[DirectPlayRule]:
        for rule in self.direct_play_profiles:
            if rule.container == container:
                return rule
        return None
