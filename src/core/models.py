"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any AT Protocol specific types. Adapters validate raw feed
records and build these; the core never inspects untyped shapes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple


class Platform(str, Enum):
    """Video platforms the pattern registry knows about."""

    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    TIKTOK = "tiktok"
    TWITCH = "twitch"
    DAILYMOTION = "dailymotion"


@dataclass(frozen=True)
class PostRef:
    """Strong reference to a post (URI plus content version)."""

    uri: str
    cid: str


@dataclass(frozen=True)
class LinkAnnotation:
    """A rich-text link attached to a byte range of a post body."""

    byte_start: int
    byte_end: int
    uri: str


@dataclass(frozen=True)
class CandidateMessage:
    """Immutable snapshot of a feed post under evaluation."""

    uri: str
    cid: str
    author_did: str
    author_handle: str
    text: str
    created_at: datetime
    external_uri: Optional[str] = None
    links: Tuple[LinkAnnotation, ...] = ()
    reply_root: Optional[PostRef] = None
    reply_parent: Optional[PostRef] = None

    @property
    def ref(self) -> PostRef:
        return PostRef(uri=self.uri, cid=self.cid)

    @property
    def is_reply(self) -> bool:
        return self.reply_parent is not None


@dataclass(frozen=True)
class ThreadNode:
    """A post in a fetched thread together with its direct replies."""

    message: CandidateMessage
    replies: Tuple["ThreadNode", ...] = ()


@dataclass(frozen=True)
class VideoReference:
    """Normalized video reference produced by the pattern registry."""

    platform: Platform
    video_id: str
    canonical_url: str
    subtype: Optional[str] = None


@dataclass(frozen=True)
class PreviewRecord:
    """Link card attached to a reply."""

    uri: str
    title: str
    description: str
    thumbnail: Any = None


@dataclass(frozen=True)
class ReplyInstruction:
    """Everything the feed client needs to post one reply."""

    text: str
    links: Tuple[LinkAnnotation, ...]
    root: PostRef
    parent: PostRef
    preview: Optional[PreviewRecord] = None


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single outbound HTTP fetch."""

    url: str
    status: int
    content_type: Optional[str] = None
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class CycleReport:
    """Counters collected during one scan cycle."""

    candidates: int = 0
    fresh: int = 0
    replied: int = 0
    skipped: int = 0
    failed: int = 0
    used_fallback: bool = False
    busy: bool = False
    replied_uris: list[str] = field(default_factory=list)
