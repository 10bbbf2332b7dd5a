"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_REPLY_PREFIX = "The Video Privacy Link You Requested:\n"
DEFAULT_PREVIEW_TITLE = "WATCH: With Video Privacy"
DEFAULT_PREVIEW_DESCRIPTION = (
    "Use Hashtag #VideoPrivacy to watch without tracking, data collection or ads"
)


@dataclass(frozen=True)
class BotIdentity:
    """The account the bot posts as."""

    handle: str
    did: Optional[str] = None

    def owns(self, author_did: str, author_handle: str) -> bool:
        if self.did and author_did == self.did:
            return True
        return bool(self.handle) and author_handle.lower() == self.handle.lower()


@dataclass(frozen=True)
class DedupConfig:
    """Fast-path cache sizing for the duplicate guard."""

    cache_capacity: int = 100
    keep_fraction: float = 0.5


@dataclass(frozen=True)
class ScanConfig:
    """Settings for one scan cycle."""

    hashtag: str
    privacy_domain: str
    search_limit: int = 25
    fallback_limit: int = 20
    max_age_hours: float = 24.0
    dispatch_delay_seconds: float = 0.0
    fallback_delay_seconds: float = 1.0
    allow_text_fallback: bool = False


@dataclass(frozen=True)
class ReplyConfig:
    """Reply text template."""

    prefix: str = DEFAULT_REPLY_PREFIX
    footer: str = ""


@dataclass(frozen=True)
class PreviewConfig:
    """Link card settings; only YouTube references get a card."""

    enabled: bool = True
    default_title: str = DEFAULT_PREVIEW_TITLE
    default_description: str = DEFAULT_PREVIEW_DESCRIPTION
