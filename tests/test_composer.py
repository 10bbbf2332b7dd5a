from __future__ import annotations

import asyncio

from fakes import FakeFeed, FakeFetcher, make_message

from core.composer import ReplyComposer, link_annotation
from core.config import ReplyConfig
from core.links import build_privacy_url, normalize_domain
from core.models import Platform, PostRef, VideoReference
from core.preview import PreviewBuilder

YOUTUBE = VideoReference(
    platform=Platform.YOUTUBE,
    video_id="ABCDEFGHIJK",
    canonical_url="https://www.youtube.com/watch?v=ABCDEFGHIJK",
    subtype="video",
)
VIMEO = VideoReference(
    platform=Platform.VIMEO,
    video_id="76979871",
    canonical_url="https://vimeo.com/76979871",
)


def test_youtube_link_carries_only_the_id() -> None:
    assert build_privacy_url(YOUTUBE, "priv.example") == "https://priv.example/video?video=ABCDEFGHIJK"


def test_other_platforms_carry_the_encoded_url() -> None:
    assert (
        build_privacy_url(VIMEO, "https://priv.example/")
        == "https://priv.example/video?video=https%3A%2F%2Fvimeo.com%2F76979871"
    )


def test_normalize_domain() -> None:
    assert normalize_domain("HTTPS://priv.example//") == "priv.example"
    assert normalize_domain(" priv.example ") == "priv.example"


def test_annotation_is_measured_in_bytes() -> None:
    url = "https://priv.example/video?video=ABCDEFGHIJK"
    prefix = "Vidéo privée ✓ →\n"
    composer = ReplyComposer(ReplyConfig(prefix=prefix, footer="Tag #vidéo for more"))
    reply = asyncio.run(composer.compose(make_message(), YOUTUBE, url))

    link = reply.links[0]
    encoded = reply.text.encode("utf-8")
    assert link.byte_start == len(prefix.encode("utf-8"))
    assert link.byte_start != len(prefix)
    assert encoded[link.byte_start:link.byte_end].decode("utf-8") == url
    assert link.uri == url


def test_link_annotation_helper() -> None:
    link = link_annotation("ab ü https://x.example", "https://x.example")
    assert (link.byte_start, link.byte_end) == (6, 23)


def test_root_post_linkage() -> None:
    trigger = make_message()
    reply = asyncio.run(ReplyComposer().compose(trigger, VIMEO, "https://priv.example/v"))
    assert reply.root == trigger.ref
    assert reply.parent == trigger.ref
    assert reply.text == "The Video Privacy Link You Requested:\nhttps://priv.example/v"
    assert reply.preview is None


def test_reply_linkage_keeps_thread_root() -> None:
    root = PostRef(uri="at://did:plc:carol/app.bsky.feed.post/root", cid="cid-root")
    parent = PostRef(uri="at://did:plc:dave/app.bsky.feed.post/mid", cid="cid-mid")
    trigger = make_message(
        "at://did:plc:alice/app.bsky.feed.post/c1",
        reply_root=root,
        reply_parent=parent,
    )
    reply = asyncio.run(ReplyComposer().compose(trigger, VIMEO, "https://priv.example/v"))
    assert reply.root == root
    assert reply.parent == trigger.ref


def test_preview_only_for_youtube() -> None:
    feed = FakeFeed()
    previews = PreviewBuilder(FakeFetcher(), feed, "priv.example")
    composer = ReplyComposer(previews=previews)

    youtube_reply = asyncio.run(composer.compose(make_message(), YOUTUBE, "https://priv.example/y"))
    vimeo_reply = asyncio.run(composer.compose(make_message(), VIMEO, "https://priv.example/v"))

    assert youtube_reply.preview is not None
    assert youtube_reply.preview.uri == "https://priv.example/y"
    assert vimeo_reply.preview is None
