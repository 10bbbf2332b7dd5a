"""Locate the post that carries the video for a triggering post."""

from __future__ import annotations

import logging
from typing import Optional

from core.extractor import ReferenceExtractor
from core.models import CandidateMessage, VideoReference
from core.ports import FeedError, FeedPort

LOGGER = logging.getLogger(__name__)


class ThreadResolver:
    """Read the video from the parent post when the trigger is a reply."""

    def __init__(self, feed: FeedPort, extractor: ReferenceExtractor) -> None:
        self._feed = feed
        self._extractor = extractor

    async def resolve_video_source(self, message: CandidateMessage) -> Optional[VideoReference]:
        if message.reply_parent is None:
            return await self._extractor.extract_from(message)

        parent_uri = message.reply_parent.uri
        try:
            # Depth 0: only the parent's own content is needed.
            node = await self._feed.fetch_thread(parent_uri, depth=0)
        except FeedError as exc:
            LOGGER.warning("Could not fetch parent %s of %s: %s", parent_uri, message.uri, exc)
            return None
        if node is None:
            LOGGER.info("Parent %s of %s is unavailable", parent_uri, message.uri)
            return None
        return await self._extractor.extract_from(node.message)
