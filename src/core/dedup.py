"""Duplicate-reply prevention (core domain).

Two tiers:
- a bounded in-memory set of post URIs we replied to (fast path, lost on
  restart)
- the post's own thread, scanned for a reply from the bot (authoritative)
"""

from __future__ import annotations

import logging
from typing import Dict, List

from core.config import BotIdentity, DedupConfig
from core.models import CandidateMessage
from core.ports import FeedError, FeedPort

LOGGER = logging.getLogger(__name__)


class ProcessedCache:
    """Insertion-ordered set of handled URIs with batched trimming.

    When an insert pushes the size past capacity, only the most recently
    inserted ``keep_fraction`` of capacity is kept.
    """

    def __init__(self, capacity: int = 100, keep_fraction: float = 0.5) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if not 0 < keep_fraction <= 1:
            raise ValueError("keep_fraction must be in (0, 1]")
        self._capacity = capacity
        self._keep = max(1, int(capacity * keep_fraction))
        self._entries: Dict[str, None] = {}

    @classmethod
    def from_config(cls, config: DedupConfig) -> "ProcessedCache":
        return cls(capacity=config.cache_capacity, keep_fraction=config.keep_fraction)

    def __contains__(self, uri: str) -> bool:
        return uri in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def snapshot(self) -> List[str]:
        return list(self._entries)

    def add(self, uri: str) -> None:
        if uri in self._entries:
            return
        self._entries[uri] = None
        if len(self._entries) > self._capacity:
            kept = list(self._entries)[-self._keep:]
            self._entries = dict.fromkeys(kept)
            LOGGER.debug("Processed cache trimmed to %s entries", len(self._entries))

    def clear(self) -> None:
        self._entries.clear()


class DuplicateGuard:
    """Decide whether a post still needs a reply.

    The cache is owned by the caller and injected; the scan controller
    guarantees a single writer, so no locking is done here.
    """

    def __init__(self, feed: FeedPort, identity: BotIdentity, cache: ProcessedCache) -> None:
        self._feed = feed
        self._identity = identity
        self._cache = cache

    async def should_process(self, message: CandidateMessage) -> bool:
        if message.uri in self._cache:
            LOGGER.info("Skipping %s (recently processed)", message.uri)
            return False
        if await self._has_bot_reply(message.uri):
            LOGGER.info("Skipping %s (already replied)", message.uri)
            return False
        return True

    def mark_handled(self, message: CandidateMessage) -> None:
        self._cache.add(message.uri)

    async def _has_bot_reply(self, uri: str) -> bool:
        try:
            node = await self._feed.fetch_thread(uri, depth=1)
        except FeedError as exc:
            LOGGER.warning("Reply check failed for %s, assuming no reply: %s", uri, exc)
            return False
        if node is None:
            return False
        return any(
            self._identity.owns(reply.message.author_did, reply.message.author_handle)
            for reply in node.replies
        )
