from __future__ import annotations

import asyncio

from fakes import FakeFeed, make_message

from core.extractor import ReferenceExtractor
from core.models import CandidateMessage, Platform, PostRef
from core.patterns import PatternRegistry
from core.ports import FeedError
from core.thread import ThreadResolver

PARENT = make_message(
    "at://did:plc:carol/app.bsky.feed.post/p1",
    text="watch this",
    external_uri="https://www.tiktok.com/@scout2015/video/6718335390845095173",
    author_did="did:plc:carol",
)


def _reply() -> CandidateMessage:
    return make_message(
        "at://did:plc:alice/app.bsky.feed.post/c1",
        text="#tag please",
        reply_root=PostRef(uri=PARENT.uri, cid=PARENT.cid),
        reply_parent=PostRef(uri=PARENT.uri, cid=PARENT.cid),
    )


def _resolver(feed: FakeFeed) -> ThreadResolver:
    return ThreadResolver(feed, ReferenceExtractor(PatternRegistry()))


def test_reply_uses_parent_content() -> None:
    feed = FakeFeed()
    feed.add_post(PARENT)

    reference = asyncio.run(_resolver(feed).resolve_video_source(_reply()))

    assert reference is not None
    assert reference.platform is Platform.TIKTOK
    assert feed.thread_calls == [(PARENT.uri, 0)]


def test_reply_ignores_its_own_link() -> None:
    feed = FakeFeed()
    feed.add_post(make_message(PARENT.uri, text="no video here"))
    reply = make_message(
        "at://did:plc:alice/app.bsky.feed.post/c2",
        external_uri="https://vimeo.com/76979871",
        reply_parent=PostRef(uri=PARENT.uri, cid=PARENT.cid),
    )

    assert asyncio.run(_resolver(feed).resolve_video_source(reply)) is None


def test_root_post_is_read_directly() -> None:
    feed = FakeFeed()
    message = make_message(external_uri="https://vimeo.com/76979871")

    reference = asyncio.run(_resolver(feed).resolve_video_source(message))

    assert reference is not None
    assert reference.platform is Platform.VIMEO
    assert feed.thread_calls == []


def test_missing_or_failing_parent_yields_none() -> None:
    feed = FakeFeed()
    assert asyncio.run(_resolver(feed).resolve_video_source(_reply())) is None

    feed.thread_errors[PARENT.uri] = FeedError("deleted")
    assert asyncio.run(_resolver(feed).resolve_video_source(_reply())) is None
