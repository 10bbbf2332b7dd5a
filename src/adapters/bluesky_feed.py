"""Bluesky feed adapter.

Implements the core FeedPort on top of the atproto async client.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from atproto import AsyncClient, models
from atproto.exceptions import AtProtocolError

from adapters.bluesky_mapper import build_messages, build_thread
from core.models import CandidateMessage, PostRef, ReplyInstruction, ThreadNode
from core.ports import FeedError

LOGGER = logging.getLogger(__name__)


def _strong_ref(ref: PostRef) -> models.ComAtprotoRepoStrongRef.Main:
    return models.ComAtprotoRepoStrongRef.Main(uri=ref.uri, cid=ref.cid)


class BlueskyFeed:
    """Thin wrapper over AsyncClient that satisfies the FeedPort contract."""

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    async def search_candidates(self, tag: str, limit: int) -> List[CandidateMessage]:
        try:
            response = await self._client.app.bsky.feed.search_posts(
                params={"q": tag, "limit": limit, "sort": "latest"}
            )
        except AtProtocolError as exc:
            raise FeedError(f"searchPosts failed: {exc}") from exc
        return build_messages(response.posts)

    async def list_timeline(self, limit: int) -> List[CandidateMessage]:
        try:
            response = await self._client.get_timeline(algorithm="reverse-chronological", limit=limit)
        except AtProtocolError as exc:
            raise FeedError(f"getTimeline failed: {exc}") from exc
        return build_messages(item.post for item in response.feed)

    async def fetch_thread(self, uri: str, depth: int) -> Optional[ThreadNode]:
        try:
            response = await self._client.get_post_thread(uri=uri, depth=depth, parent_height=0)
        except AtProtocolError as exc:
            raise FeedError(f"getPostThread failed for {uri}: {exc}") from exc
        return build_thread(response.thread)

    async def post_reply(self, reply: ReplyInstruction) -> str:
        facets = [
            models.AppBskyRichtextFacet.Main(
                index=models.AppBskyRichtextFacet.ByteSlice(
                    byte_start=link.byte_start,
                    byte_end=link.byte_end,
                ),
                features=[models.AppBskyRichtextFacet.Link(uri=link.uri)],
            )
            for link in reply.links
        ]
        embed = None
        if reply.preview is not None:
            embed = models.AppBskyEmbedExternal.Main(
                external=models.AppBskyEmbedExternal.External(
                    uri=reply.preview.uri,
                    title=reply.preview.title,
                    description=reply.preview.description,
                    thumb=reply.preview.thumbnail,
                )
            )
        reply_to = models.AppBskyFeedPost.ReplyRef(
            root=_strong_ref(reply.root),
            parent=_strong_ref(reply.parent),
        )
        try:
            created = await self._client.send_post(
                text=reply.text,
                reply_to=reply_to,
                embed=embed,
                facets=facets,
            )
        except AtProtocolError as exc:
            raise FeedError(f"post failed for {reply.parent.uri}: {exc}") from exc
        return created.uri

    async def upload_asset(self, data: bytes, mime_type: str) -> Any:
        try:
            response = await self._client.upload_blob(data)
        except AtProtocolError as exc:
            raise FeedError(f"uploadBlob failed: {exc}") from exc
        LOGGER.info("Uploaded %s asset (%s bytes)", mime_type, len(data))
        return response.blob
