"""Tests covering the HTTP surface."""

from __future__ import annotations

from fastapi.testclient import TestClient

from devprofile.api.server import create_app
from devprofile.api.state import ContextRegistry
from devprofile.config import ProfileConfig


def make_client(runtime: str = "generic") -> TestClient:
    return TestClient(create_app(config=ProfileConfig(runtime=runtime)))


def test_healthz() -> None:
    response = make_client("tizen-3.0").get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "runtime": "tizen-3.0"}


def test_list_runtimes() -> None:
    payload = make_client().get("/runtimes").json()

    assert payload["default"] == "generic"
    names = [entry["name"] for entry in payload["runtimes"]]
    assert names == sorted(names)
    assert "tizen-5.5-fhd" in names


def test_profile_for_named_runtime() -> None:
    response = make_client().get("/profile", params={"runtime": "tizen-5.5-fhd"})

    assert response.status_code == 200
    payload = response.json()
    codecs = [rule.get("Codec") for rule in payload["CodecProfiles"]]
    assert codecs == ["h264", "hevc", "av1", None, None]
    assert payload["ContainerProfiles"][0]["Conditions"][0]["Value"] == "32"


def test_profile_for_default_runtime() -> None:
    payload = make_client("tizen-6.5-uhd").get("/profile").json()

    assert payload["ContainerProfiles"] == []
    hevc = next(rule for rule in payload["CodecProfiles"] if rule.get("Codec") == "hevc")
    level = next(cond for cond in hevc["Conditions"] if cond["Property"] == "VideoLevel")
    assert level["Value"] == "153"
    assert all(cond["Property"] != "VideoBitrate" for cond in hevc["Conditions"])


def test_unknown_runtime_is_404() -> None:
    response = make_client().get("/profile", params={"runtime": "nope"})

    assert response.status_code == 404


def test_named_contexts_are_reused() -> None:
    registry = ContextRegistry(ProfileConfig(runtime="generic"))
    client = TestClient(create_app(registry=registry))

    client.get("/profile", params={"runtime": "chrome-desktop"})
    context = registry.named("chrome-desktop")
    client.get("/profile", params={"runtime": "chrome-desktop"})

    assert registry.named("chrome-desktop") is context
    assert context.cache.hls_supported is True


def test_post_profile_report() -> None:
    report = {
        "userAgent": "Mozilla/5.0 (X11; Linux x86_64) Chrome/120.0",
        "mediaSource": True,
        "canPlayType": {
            'video/mp4; codecs="avc1.42E01E, mp4a.40.2"': "probably",
            "audio/mpeg": "probably",
        },
    }

    response = make_client().post("/profile", json=report)

    assert response.status_code == 200
    payload = response.json()
    containers = [rule["Container"] for rule in payload["DirectPlayProfiles"]]
    assert containers == ["mp4,m4v", "hls", "mp3"]
    assert payload["TranscodingProfiles"][0]["Container"] == "ts"


def test_post_invalid_report_is_422() -> None:
    response = make_client().post("/profile", json={"canPlayType": "everything"})

    assert response.status_code == 422


def test_post_hints() -> None:
    report = {"platform": "tizen", "userAgent": "Mozilla/5.0 (SMART-TV; Tizen 6.5)"}

    payload = make_client().post("/hints", json=report).json()

    assert payload == {
        "isTizen": True,
        "tizenVersion": 6.5,
        "canPlayHls": True,
        "canPlayNativeHls": True,
        "useHlsJs": False,
        "supportsHdr10": True,
        "supportsDolbyVision": False,
        "physicalAudioChannels": 6,
    }


def test_facts_for_named_runtime() -> None:
    payload = make_client().get("/facts", params={"runtime": "tizen-5.5-fhd"}).json()

    assert payload["platform"] == "tizen"
    assert payload["version"] == 5.5
    assert payload["dolby_vision"] is False
    assert payload["max_video_bitrate"] == 20_000_000
    assert payload["audio_formats"] == ["aac", "flac", "mp3", "wav"]
    assert payload["hevc_profiles"] == ["main", "main 10"]
