"""
Negotiation document assembly.

:func:`assemble` is a pure function of :class:`CapabilityFacts`.  Codec and
range-type lists are described as tables of ``(predicate, values)`` extensions
folded onto a base list, so each capability flag maps to exactly one table row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .document import (
    CodecRule,
    Condition,
    ConditionOperator,
    ContainerRule,
    DeliveryProtocol,
    DirectPlayRule,
    MediaType,
    NegotiationDocument,
    ResponseShapeRule,
    SubtitleMethod,
    SubtitleRule,
    TranscodingRule,
)
from .facts import CapabilityFacts

LOG = logging.getLogger(__name__)

Predicate = Callable[[CapabilityFacts], bool]
Extension = Tuple[Predicate, Tuple[str, ...]]

MAX_STREAMS_FREE_VERSION = 6.5
MAX_STREAMS = 32
DV_FALLBACK_VERSION = 3.0
AV1_MAX_LEVEL = 15  # level 5.3

DIRECT_PLAY_AUDIO_FORMATS = ("mp3", "aac", "flac", "wav", "ogg", "opus")
TRANSCODING_AUDIO_FORMATS = ("aac", "mp3", "opus", "wav")

H264_PROFILES = ("high", "main", "baseline", "constrained baseline")
AV1_PROFILES = ("main",)

DOVI_FALLBACK_RANGE_TYPES = (
    "DOVIWithHDR10",
    "DOVIWithHDR10Plus",
    "DOVIWithSDR",
    "DOVIWithHLG",
    "DOVIWithEL",
    "DOVIWithELHDR10Plus",
    "DOVIInvalid",
)
AV1_DOVI_FALLBACK_RANGE_TYPES = (
    "DOVIWithHDR10",
    "DOVIWithHDR10Plus",
    "DOVIWithEL",
    "DOVIWithELHDR10Plus",
    "DOVIInvalid",
)

EXTERNAL_SUBTITLES = ("vtt", "srt", "ass", "ssa")
BURN_IN_SUBTITLES = ("pgssub", "dvdsub", "dvbsub", "sub")


def fold(base: Iterable[str], extensions: Sequence[Extension], facts: CapabilityFacts) -> List[str]:
    """
    Append the values of every extension whose predicate holds, in table order.
    """

    values = list(base)
    for predicate, extra in extensions:
        if predicate(facts):
            values.extend(extra)
    return values


def accepts_dolby_vision_fallback(facts: CapabilityFacts) -> bool:
    """
    True DV layers are never decoded, but the base layer next to them is safe
    to play, so advertising it spares the server a remux.
    """

    return facts.version >= DV_FALLBACK_VERSION


def _opus(facts: CapabilityFacts) -> bool:
    return facts.can_play_audio("opus")


def _muxed_flac(facts: CapabilityFacts) -> bool:
    # Muxed FLAC has A/V timing defects on Tizen; standalone FLAC is fine.
    return facts.can_play_audio("flac") and not facts.is_tv


VIDEO_AUDIO_CODECS: Tuple[Extension, ...] = (
    (lambda f: f.ac3, ("ac3",)),
    (lambda f: f.eac3, ("eac3",)),
    (lambda f: f.dts, ("dca", "dts")),
    (lambda f: f.is_tv, ("pcm_s16le", "pcm_s24le", "aac_latm")),
    (_opus, ("opus",)),
    (_muxed_flac, ("flac",)),
)

HLS_AUDIO_CODECS: Tuple[Extension, ...] = (
    (lambda f: f.ac3, ("ac3",)),
    (lambda f: f.eac3, ("eac3",)),
)

MP4_VIDEO_CODECS: Tuple[Extension, ...] = (
    (lambda f: f.h264, ("h264",)),
    (lambda f: f.hevc, ("hevc",)),
    (lambda f: f.av1, ("av1",)),
)

MKV_VIDEO_CODECS = MP4_VIDEO_CODECS

TS_VIDEO_CODECS: Tuple[Extension, ...] = (
    (lambda f: f.h264, ("h264",)),
    (lambda f: f.hevc, ("hevc",)),
)

HLS_VIDEO_CODECS: Tuple[Extension, ...] = (
    (lambda f: f.h264, ("h264",)),
    (lambda f: f.hevc and f.is_tv, ("hevc",)),
)

HEVC_RANGE_TYPES: Tuple[Extension, ...] = (
    (lambda f: f.hdr10, ("HDR10", "HDR10Plus")),
    (lambda f: f.hlg, ("HLG",)),
    (accepts_dolby_vision_fallback, DOVI_FALLBACK_RANGE_TYPES),
)

AV1_RANGE_TYPES: Tuple[Extension, ...] = (
    (lambda f: f.hdr10, ("HDR10", "HDR10Plus")),
    (lambda f: f.hlg, ("HLG",)),
    (accepts_dolby_vision_fallback, AV1_DOVI_FALLBACK_RANGE_TYPES),
)


@dataclass(frozen=True)
class DirectPlayContainer:
    container: Tuple[str, ...]
    available: Predicate
    video_codecs: Tuple[Extension, ...]
    audio_codecs: Callable[[CapabilityFacts], List[str]]


@dataclass(frozen=True)
class VideoCodecProfile:
    codec: str
    supported: Predicate
    profiles: Callable[[CapabilityFacts], Sequence[str]]
    range_types: Tuple[Extension, ...]
    max_level: Callable[[CapabilityFacts], int]


def video_audio_codecs(facts: CapabilityFacts) -> List[str]:
    return fold(("aac", "mp3"), VIDEO_AUDIO_CODECS, facts)


def hls_audio_codecs(facts: CapabilityFacts) -> List[str]:
    return fold(("aac", "mp3"), HLS_AUDIO_CODECS, facts)


VIDEO_CONTAINERS: Tuple[DirectPlayContainer, ...] = (
    DirectPlayContainer(("mp4", "m4v"), lambda f: True, MP4_VIDEO_CODECS, video_audio_codecs),
    DirectPlayContainer(("mkv",), lambda f: f.mkv, MKV_VIDEO_CODECS, video_audio_codecs),
    DirectPlayContainer(("ts", "mpegts"), lambda f: f.ts, TS_VIDEO_CODECS, video_audio_codecs),
    DirectPlayContainer(("hls",), lambda f: f.hls, HLS_VIDEO_CODECS, hls_audio_codecs),
)

VIDEO_CODEC_PROFILES: Tuple[VideoCodecProfile, ...] = (
    VideoCodecProfile(
        "h264", lambda f: f.h264, lambda f: H264_PROFILES, (), lambda f: f.max_h264_level
    ),
    VideoCodecProfile(
        "hevc", lambda f: f.hevc, lambda f: f.hevc_profiles, HEVC_RANGE_TYPES, lambda f: f.max_hevc_level
    ),
    VideoCodecProfile(
        "av1", lambda f: f.av1, lambda f: AV1_PROFILES, AV1_RANGE_TYPES, lambda f: AV1_MAX_LEVEL
    ),
)


def _less_than_equal(property_name: str, value: int, required: bool = False) -> Condition:
    return Condition(
        condition=ConditionOperator.LESS_THAN_EQUAL,
        property_name=property_name,
        value=value,
        is_required=required,
    )


def _equals_any(property_name: str, values: Sequence[str], required: bool = False) -> Condition:
    return Condition(
        condition=ConditionOperator.EQUALS_ANY,
        property_name=property_name,
        value=list(values),
        is_required=required,
    )


def build_direct_play_rules(facts: CapabilityFacts) -> List[DirectPlayRule]:
    rules: List[DirectPlayRule] = []
    for entry in VIDEO_CONTAINERS:
        if not entry.available(facts):
            continue
        video_codecs = fold((), entry.video_codecs, facts)
        if not video_codecs:
            continue
        rules.append(
            DirectPlayRule(
                container=list(entry.container),
                type=MediaType.VIDEO,
                video_codec=video_codecs,
                audio_codec=entry.audio_codecs(facts),
            )
        )

    for fmt in DIRECT_PLAY_AUDIO_FORMATS:
        if facts.can_play_audio(fmt):
            rules.append(DirectPlayRule(container=fmt, type=MediaType.AUDIO))
    return rules


def hls_segment_container(facts: CapabilityFacts) -> str:
    return "mp4" if facts.native_hls_fmp4 else "ts"


def build_transcoding_rules(facts: CapabilityFacts) -> List[TranscodingRule]:
    rules: List[TranscodingRule] = []
    hls_video_codecs = fold((), HLS_VIDEO_CODECS, facts)
    if facts.hls and hls_video_codecs:
        rules.append(
            TranscodingRule(
                container=hls_segment_container(facts),
                type=MediaType.VIDEO,
                audio_codec=hls_audio_codecs(facts),
                video_codec=hls_video_codecs,
                protocol=DeliveryProtocol.HLS,
                max_audio_channels=facts.audio_channels,
                min_segments=1,
                break_on_non_key_frames=False,
            )
        )

    for fmt in TRANSCODING_AUDIO_FORMATS:
        if facts.can_play_audio(fmt):
            rules.append(
                TranscodingRule(
                    container=fmt,
                    type=MediaType.AUDIO,
                    audio_codec=fmt,
                    protocol=DeliveryProtocol.HTTP,
                    max_audio_channels=facts.audio_channels,
                )
            )
    return rules


def build_container_rules(facts: CapabilityFacts) -> List[ContainerRule]:
    # The demuxer, not any codec, refuses files with more than 32 streams.
    if facts.version >= MAX_STREAMS_FREE_VERSION:
        return []
    return [
        ContainerRule(
            type=MediaType.VIDEO,
            conditions=(_less_than_equal("NumStreams", MAX_STREAMS),),
        )
    ]


def _bitrate_condition(facts: CapabilityFacts, required: bool) -> Optional[Condition]:
    if facts.max_video_bitrate is None:
        return None
    return _less_than_equal("VideoBitrate", facts.max_video_bitrate, required=required)


def build_codec_rules(facts: CapabilityFacts) -> List[CodecRule]:
    rules: List[CodecRule] = []
    for entry in VIDEO_CODEC_PROFILES:
        if not entry.supported(facts):
            continue
        conditions = [
            _equals_any("VideoProfile", entry.profiles(facts)),
            _equals_any("VideoRangeType", fold(("SDR",), entry.range_types, facts)),
            _less_than_equal("VideoLevel", entry.max_level(facts)),
        ]
        # Exceeding the panel ceiling fails outright, so this one is binding.
        bitrate = _bitrate_condition(facts, required=True)
        if bitrate is not None:
            conditions.append(bitrate)
        rules.append(CodecRule(type=MediaType.VIDEO, codec=entry.codec, conditions=conditions))

    bitrate = _bitrate_condition(facts, required=False)
    if bitrate is not None:
        rules.append(CodecRule(type=MediaType.VIDEO, conditions=(bitrate,)))

    rules.append(
        CodecRule(
            type=MediaType.VIDEO_AUDIO,
            conditions=(_less_than_equal("AudioChannels", facts.audio_channels),),
        )
    )
    return rules


def build_subtitle_rules() -> List[SubtitleRule]:
    rules = [SubtitleRule(format=fmt, method=SubtitleMethod.EXTERNAL) for fmt in EXTERNAL_SUBTITLES]
    # Bitmap tracks cannot be rendered client side.
    rules.extend(SubtitleRule(format=fmt, method=SubtitleMethod.ENCODE) for fmt in BURN_IN_SUBTITLES)
    return rules


def build_response_rules() -> List[ResponseShapeRule]:
    return [ResponseShapeRule(type=MediaType.VIDEO, container="m4v", mime_type="video/mp4")]


def assemble(facts: CapabilityFacts) -> NegotiationDocument:
    """
    Build the negotiation document for ``facts``.

    Deterministic: identical facts always produce equal documents.
    """

    document = NegotiationDocument(
        direct_play_profiles=build_direct_play_rules(facts),
        transcoding_profiles=build_transcoding_rules(facts),
        container_profiles=build_container_rules(facts),
        codec_profiles=build_codec_rules(facts),
        subtitle_profiles=build_subtitle_rules(),
        response_profiles=build_response_rules(),
    )
    LOG.debug(
        "Assembled profile: %d direct play, %d transcoding, %d codec rules",
        len(document.direct_play_profiles),
        len(document.transcoding_profiles),
        len(document.codec_profiles),
    )
    return document
