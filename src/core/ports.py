"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the feed client and outbound HTTP
so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol

from core.models import CandidateMessage, FetchResult, ReplyInstruction, ThreadNode


class FeedError(RuntimeError):
    """Raised by feed adapters when a feed operation fails."""


class FetchError(RuntimeError):
    """Raised by fetch adapters when an outbound request fails."""


class FeedPort(Protocol):
    """Feed operations required by the core pipeline."""

    async def search_candidates(self, tag: str, limit: int) -> List[CandidateMessage]:
        ...

    async def list_timeline(self, limit: int) -> List[CandidateMessage]:
        ...

    async def fetch_thread(self, uri: str, depth: int) -> Optional[ThreadNode]:
        ...

    async def post_reply(self, reply: ReplyInstruction) -> str:
        ...

    async def upload_asset(self, data: bytes, mime_type: str) -> Any:
        ...


class FetchPort(Protocol):
    """Generic outbound fetch, redirects followed to completion."""

    async def fetch(self, url: str) -> FetchResult:
        ...
