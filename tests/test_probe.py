"""Tests covering runtime capability probing."""

from __future__ import annotations

import logging

from devprofile.assembler import assemble
from devprofile.facts import PLATFORM_BROWSER, PLATFORM_TIZEN
from devprofile.platform import ScriptedAdapter
from devprofile.probe import (
    FHD_MAX_VIDEO_BITRATE,
    CapabilityProbe,
    cross_origin_value,
    is_playable_answer,
)

H264_MIME = 'video/mp4; codecs="avc1.42E01E, mp4a.40.2"'
AV1_8BIT = 'video/mp4; codecs="av01.0.15M.08"'
AV1_10BIT = 'video/mp4; codecs="av01.0.15M.10"'
TIZEN_UA = "Mozilla/5.0 (SMART-TV; Linux; Tizen {version}) AppleWebKit/537.36 TV Safari/537.36"


def tizen_probe(version: str = "5.5", **kwargs: object) -> CapabilityProbe:
    adapter = ScriptedAdapter(user_agent=TIZEN_UA.format(version=version), globals=["tizen"], **kwargs)
    return CapabilityProbe(adapter)


def test_playable_answers() -> None:
    assert is_playable_answer("probably") is True
    assert is_playable_answer("maybe") is True
    assert is_playable_answer("no") is False
    assert is_playable_answer("") is False
    assert is_playable_answer(None) is False


def test_generic_browser_identification() -> None:
    probe = CapabilityProbe(ScriptedAdapter(user_agent="Mozilla/5.0 (X11; Linux x86_64)"))

    assert probe.is_tizen() is False
    assert probe.tizen_version() == 0.0
    assert probe.collect().platform == PLATFORM_BROWSER


def test_tizen_version_parsing() -> None:
    assert tizen_probe("5.5").tizen_version() == 5.5
    assert tizen_probe("6.5").tizen_version() == 6.5

    global_only = CapabilityProbe(ScriptedAdapter(globals=["tizen"]))
    assert global_only.is_tizen() is True
    assert global_only.tizen_version() == 4.0

    user_agent_only = CapabilityProbe(ScriptedAdapter(user_agent="Mozilla/5.0 (SMART-TV; Tizen 3.0)"))
    assert user_agent_only.is_tizen() is True
    assert user_agent_only.tizen_version() == 3.0


def test_tizen_short_circuits_under_reported_codecs() -> None:
    probe = tizen_probe("4.0")

    assert probe.can_play_hevc() is True
    assert probe.supports_ac3() is True
    assert probe.supports_eac3() is True
    assert probe.can_play_mkv() is True
    assert probe.can_play_ts() is True
    assert probe.can_play_native_hls() is True
    assert probe.supports_hdr10() is True
    assert probe.supports_hlg() is True
    assert probe.supports_dolby_vision() is False
    assert probe.adapter.queries == []


def test_browser_hevc_uses_query() -> None:
    probe = CapabilityProbe(ScriptedAdapter(playable=['video/mp4; codecs="hev1.1.0.L120"']))

    assert probe.can_play_hevc() is True
    assert probe.supports_hdr10() is False
    assert probe.can_play_ts() is False


def test_av1_needs_both_bit_depths_below_threshold() -> None:
    assert tizen_probe("5.5").can_play_av1() is True
    assert tizen_probe("5.0").can_play_av1() is False
    assert CapabilityProbe(ScriptedAdapter(playable=[AV1_8BIT])).can_play_av1() is False
    assert CapabilityProbe(ScriptedAdapter(playable=[AV1_8BIT, AV1_10BIT])).can_play_av1() is True


def test_dts_dropped_from_tizen_4() -> None:
    dts = ['video/mp4; codecs="dts+"']

    assert tizen_probe("4.0", playable=dts).can_play_dts() is False
    assert tizen_probe("3.0", playable=dts).can_play_dts() is True
    assert CapabilityProbe(ScriptedAdapter(playable=['video/mp4; codecs="dts-"'])).can_play_dts() is True
    assert CapabilityProbe(ScriptedAdapter()).can_play_dts() is False


def test_audio_formats() -> None:
    tizen = tizen_probe("5.0")
    assert tizen.can_play_audio_format("flac") is True
    assert tizen.can_play_audio_format("wma") is True
    assert tizen.can_play_audio_format("opus") is False

    browser = CapabilityProbe(ScriptedAdapter(answers={"audio/flac": "maybe", "audio/ogg": "no"}))
    assert browser.can_play_audio_format("flac") is True
    assert browser.can_play_audio_format("ogg") is False
    assert browser.can_play_audio_format("wma") is False


def test_numeric_ceilings() -> None:
    assert tizen_probe("5.0").max_h264_level() == 52
    assert tizen_probe("4.0").max_h264_level() == 51
    assert CapabilityProbe(ScriptedAdapter(playable=['video/mp4; codecs="avc1.640833"'])).max_h264_level() == 51
    assert CapabilityProbe(ScriptedAdapter()).max_h264_level() == 42

    assert tizen_probe("5.0").max_hevc_level() == 153
    assert tizen_probe("5.0", playable=['video/mp4; codecs="hvc1.2.4.L183"']).max_hevc_level() == 183
    assert CapabilityProbe(ScriptedAdapter()).max_hevc_level() == 120

    assert tizen_probe().physical_audio_channels() == 6
    assert CapabilityProbe(ScriptedAdapter()).physical_audio_channels() == 2


def test_hevc_profiles() -> None:
    assert tizen_probe().hevc_profiles() == ("main", "main 10")
    main10 = CapabilityProbe(ScriptedAdapter(playable=['video/mp4; codecs="hev1.2.4.L123"']))
    assert main10.hevc_profiles() == ("main", "main 10")
    assert CapabilityProbe(ScriptedAdapter()).hevc_profiles() == ("main",)


def test_panel_bitrate_ceiling() -> None:
    assert tizen_probe(uhd_panel=False).global_max_video_bitrate() == FHD_MAX_VIDEO_BITRATE
    assert tizen_probe(uhd_panel=True).global_max_video_bitrate() is None
    assert tizen_probe(uhd_panel=None).global_max_video_bitrate() is None
    browser = CapabilityProbe(ScriptedAdapter(uhd_panel=False))
    assert browser.global_max_video_bitrate() is None


def test_panel_query_failure_fails_open(caplog) -> None:
    probe = tizen_probe(uhd_panel=False, failures={"is_uhd_panel": RuntimeError("productinfo busy")})

    with caplog.at_level(logging.INFO, logger="devprofile.probe"):
        assert probe.global_max_video_bitrate() is None

    assert "Could not detect panel type" in caplog.text


def test_query_exceptions_degrade_to_absent() -> None:
    adapter = ScriptedAdapter(playable=[H264_MIME], failures={"can_play_type": RuntimeError("boom")})
    probe = CapabilityProbe(adapter)

    assert probe.can_play_h264() is False
    facts = probe.collect()
    assert facts.h264 is False
    assert facts.max_h264_level == 42


def test_identification_failure_means_generic_browser() -> None:
    adapter = ScriptedAdapter(failures={"has_global": RuntimeError("no globals")})
    probe = CapabilityProbe(adapter)

    assert probe.is_tizen() is False
    assert probe.collect().platform == PLATFORM_BROWSER


def test_unreadable_identification_uses_version_floor(caplog) -> None:
    adapter = ScriptedAdapter(globals=["tizen"], failures={"identification": RuntimeError("ua hidden")})
    probe = CapabilityProbe(adapter)

    with caplog.at_level(logging.INFO, logger="devprofile.probe"):
        assert probe.tizen_version() == 4.0
    assert "Could not read platform identification" in caplog.text

    facts = probe.collect()
    assert facts.platform == PLATFORM_TIZEN
    assert facts.version == 4.0
    assert facts.dts is False
    hevc_ranges = assemble(facts).codec_rule("hevc").condition_for("VideoRangeType").values
    assert "DOVIWithHDR10" in hevc_ranges


def test_throwing_codec_queries_keep_tizen_fallbacks() -> None:
    probe = tizen_probe("4.0", failures={"can_play_type": RuntimeError("decoder busy")})

    assert probe.max_hevc_level() == 153
    assert probe.hevc_profiles() == ("main", "main 10")

    facts = probe.collect()
    assert facts.max_hevc_level == 153
    assert facts.hevc_profiles == ("main", "main 10")
    assert facts.max_h264_level == 51


def test_missing_query_api_supports_nothing() -> None:
    probe = CapabilityProbe(ScriptedAdapter(playable=[H264_MIME], query_api=False))

    facts = probe.collect()
    assert facts.h264 is False
    assert facts.audio_formats == frozenset()


def test_video_element_is_shared() -> None:
    adapter = ScriptedAdapter()
    probe = CapabilityProbe(adapter)

    probe.collect()
    # One video element plus one audio element per probed audio format.
    assert adapter.elements_created == 7

    probe.collect()
    assert adapter.elements_created == 13


def test_hls_answer_is_cached_until_reset() -> None:
    adapter = ScriptedAdapter()
    probe = CapabilityProbe(adapter)

    assert probe.can_play_hls() is False
    adapter.media_source = True
    assert probe.can_play_hls() is False
    assert probe.collect().hls is False

    probe.cache.reset()
    assert probe.can_play_hls() is True


def test_bitrate_ceiling_is_not_cached() -> None:
    adapter = ScriptedAdapter(globals=["tizen"], uhd_panel=None)
    probe = CapabilityProbe(adapter)

    assert probe.collect().max_video_bitrate is None
    adapter.uhd_panel = False
    assert probe.collect().max_video_bitrate == FHD_MAX_VIDEO_BITRATE


def test_hls_js_selection() -> None:
    assert tizen_probe(media_source=True).should_use_hls_js() is False
    assert CapabilityProbe(ScriptedAdapter(media_source=True)).should_use_hls_js() is True
    native = CapabilityProbe(
        ScriptedAdapter(media_source=True, playable=["application/vnd.apple.mpegURL"])
    )
    assert native.should_use_hls_js() is False
    assert CapabilityProbe(ScriptedAdapter()).should_use_hls_js() is False


def test_cross_origin_value() -> None:
    assert cross_origin_value({"IsRemote": True}) is None
    assert cross_origin_value({"IsRemote": False}) == "anonymous"
    assert cross_origin_value(None) == "anonymous"


def test_collect_tizen_facts() -> None:
    facts = tizen_probe("5.5", playable=[H264_MIME], uhd_panel=False).collect()

    assert facts.platform == PLATFORM_TIZEN
    assert facts.is_tv is True
    assert facts.version == 5.5
    assert facts.h264 and facts.hevc and facts.av1
    assert facts.dts is False
    assert facts.dolby_vision is False
    assert facts.native_hls_fmp4 is True
    assert facts.audio_formats == frozenset({"flac"})
    assert facts.max_video_bitrate == FHD_MAX_VIDEO_BITRATE


class DriftingAdapter(ScriptedAdapter):
    """Reports a different firmware version on every identification read."""

    def __init__(self, *versions: str, **kwargs: object) -> None:
        super().__init__(globals=["tizen"], **kwargs)
        self.versions = list(versions)
        self.identification_reads = 0

    def identification(self) -> str:
        self.identification_reads += 1
        version = self.versions[min(self.identification_reads, len(self.versions)) - 1]
        return TIZEN_UA.format(version=version)


def test_collect_reads_platform_once() -> None:
    adapter = DriftingAdapter("5.5", "3.0")
    probe = CapabilityProbe(adapter)

    facts = probe.collect()

    assert adapter.identification_reads == 1
    assert facts.version == 5.5
    assert facts.av1 is True
    assert facts.native_hls_fmp4 is True
    assert facts.max_h264_level == 52

    # Outside a snapshot the probe answers live again.
    assert probe.tizen_version() == 3.0
