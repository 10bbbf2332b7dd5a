from __future__ import annotations

from core.models import Platform
from core.patterns import PatternRegistry

REGISTRY = PatternRegistry()


def test_youtube_watch_with_and_without_scheme() -> None:
    for text in (
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "http://youtube.com/watch?v=dQw4w9WgXcQ",
        "youtube.com/watch?v=dQw4w9WgXcQ",
        "www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
    ):
        reference = REGISTRY.match(f"Check this out #videoprivacy {text}")
        assert reference is not None, text
        assert reference.platform is Platform.YOUTUBE
        assert reference.video_id == "dQw4w9WgXcQ"
        assert reference.canonical_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        assert reference.subtype == "video"


def test_youtube_tracking_parameters_are_dropped() -> None:
    reference = REGISTRY.match("https://www.youtube.com/watch?v=dQw4w9WgXcQ&si=abc123&t=42s")
    assert reference is not None
    assert reference.video_id == "dQw4w9WgXcQ"
    assert "si=" not in reference.canonical_url

    reference = REGISTRY.match("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ")
    assert reference is not None
    assert reference.video_id == "dQw4w9WgXcQ"


def test_youtube_short_domain_keeps_its_shape() -> None:
    reference = REGISTRY.match("https://youtu.be/MxmKc0OhsnU?si=KicBE3tt2pcLmgrF")
    assert reference is not None
    assert reference.video_id == "MxmKc0OhsnU"
    assert reference.canonical_url == "https://youtu.be/MxmKc0OhsnU"
    assert reference.subtype == "video"


def test_youtube_shorts_subtype() -> None:
    reference = REGISTRY.match("https://youtube.com/shorts/iSaCvsxEfFg?si=37C2Bz0h74ZP97tc")
    assert reference is not None
    assert reference.video_id == "iSaCvsxEfFg"
    assert reference.subtype == "short"
    assert reference.canonical_url == "https://www.youtube.com/shorts/iSaCvsxEfFg"


def test_youtube_embed_and_live() -> None:
    embed = REGISTRY.match("https://www.youtube.com/embed/dQw4w9WgXcQ?autoplay=1")
    live = REGISTRY.match("youtube.com/live/dQw4w9WgXcQ")
    assert embed is not None and embed.canonical_url == "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert live is not None and live.video_id == "dQw4w9WgXcQ"


def test_youtube_rejects_short_or_long_tokens() -> None:
    assert REGISTRY.match("#videoprivacy www.youtube.com/watch?v=SmmL") is None
    assert REGISTRY.match("https://www.youtube.com/watch?v=dQw4w9WgXc...") is None
    assert REGISTRY.match("https://www.youtube.com/watch?v=dQw4w9WgXcQQ") is None


def test_lookalike_hosts_are_ignored() -> None:
    assert REGISTRY.match("https://notyoutube.com/watch?v=dQw4w9WgXcQ") is None


def test_vimeo() -> None:
    for text in ("https://vimeo.com/76979871?share=copy", "player.vimeo.com/video/76979871"):
        reference = REGISTRY.match(text)
        assert reference is not None, text
        assert reference.platform is Platform.VIMEO
        assert reference.video_id == "76979871"
        assert reference.canonical_url == "https://vimeo.com/76979871"


def test_tiktok() -> None:
    reference = REGISTRY.match(
        "www.tiktok.com/@scout2015/video/6718335390845095173?is_from_webapp=1&sender_device=pc"
    )
    assert reference is not None
    assert reference.platform is Platform.TIKTOK
    assert reference.video_id == "6718335390845095173"
    assert reference.canonical_url == "https://www.tiktok.com/@scout2015/video/6718335390845095173"


def test_twitch_video_and_clips() -> None:
    video = REGISTRY.match("https://www.twitch.tv/videos/1234567890?t=1h2m")
    assert video is not None
    assert video.platform is Platform.TWITCH
    assert video.subtype == "video"
    assert video.video_id == "1234567890"

    clip = REGISTRY.match("https://www.twitch.tv/somechannel/clip/FunnyClipSlug-abc123?filter=clips")
    assert clip is not None
    assert clip.subtype == "clip"
    assert clip.video_id == "FunnyClipSlug-abc123"
    assert clip.canonical_url == "https://clips.twitch.tv/FunnyClipSlug-abc123"

    short = REGISTRY.match("clips.twitch.tv/AwkwardHelplessSalamander")
    assert short is not None
    assert short.video_id == "AwkwardHelplessSalamander"


def test_dailymotion() -> None:
    for text in ("https://www.dailymotion.com/video/x8abc12?playlist=x6hynp", "dai.ly/x8abc12"):
        reference = REGISTRY.match(text)
        assert reference is not None, text
        assert reference.platform is Platform.DAILYMOTION
        assert reference.video_id == "x8abc12"
        assert reference.canonical_url == "https://www.dailymotion.com/video/x8abc12"


def test_registry_order_beats_position_in_text() -> None:
    reference = REGISTRY.match("vimeo.com/76979871 and then youtu.be/dQw4w9WgXcQ")
    assert reference is not None
    assert reference.platform is Platform.YOUTUBE


def test_find_short_link() -> None:
    assert REGISTRY.find_short_link("see vm.tiktok.com/ZMabc123/ now") == "https://vm.tiktok.com/ZMabc123/"
    assert REGISTRY.find_short_link("https://www.tiktok.com/t/ZTRabc/") == "https://www.tiktok.com/t/ZTRabc/"
    assert REGISTRY.find_short_link("https://youtu.be/dQw4w9WgXcQ") is None


def test_short_domains_accept_www_prefix() -> None:
    cases = {
        "https://www.youtu.be/dQw4w9WgXcQ": "https://youtu.be/dQw4w9WgXcQ",
        "www.dai.ly/x8abc12": "https://www.dailymotion.com/video/x8abc12",
        "https://www.clips.twitch.tv/AwkwardHelplessSalamander": "https://clips.twitch.tv/AwkwardHelplessSalamander",
    }
    for text, canonical in cases.items():
        reference = REGISTRY.match(text)
        assert reference is not None, text
        assert reference.canonical_url == canonical


def test_tiktok_and_clip_ids_need_full_length() -> None:
    assert REGISTRY.match("https://www.tiktok.com/@scout2015/video/67183353908450951") is None
    assert REGISTRY.match("clips.twitch.tv/Awk") is None
