"""Best-effort link card for replies (core domain).

Only YouTube references get a card. Metadata and thumbnail lookups may fail
freely; the card then falls back to default title and description, and a
missing thumbnail simply leaves the card without an image.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Optional, Tuple
from urllib.parse import quote

from core.config import PreviewConfig
from core.links import normalize_domain
from core.models import Platform, PreviewRecord, VideoReference
from core.ports import FeedError, FeedPort, FetchError, FetchPort

LOGGER = logging.getLogger(__name__)

ThumbnailSource = Callable[[VideoReference], str]


def platform_thumbnail_url(reference: VideoReference) -> str:
    return f"https://img.youtube.com/vi/{reference.video_id}/maxresdefault.jpg"


class PreviewBuilder:
    """Build a PreviewRecord from the privacy domain's metadata endpoints."""

    def __init__(
        self,
        fetcher: FetchPort,
        feed: FeedPort,
        domain: str,
        config: Optional[PreviewConfig] = None,
    ) -> None:
        self._fetcher = fetcher
        self._feed = feed
        self._base = f"https://{normalize_domain(domain)}"
        self._config = config or PreviewConfig()
        # Tried in order; the first image that downloads and uploads wins.
        self._thumbnail_sources: List[Tuple[str, ThumbnailSource]] = [
            ("overlay", self._overlay_thumbnail_url),
            ("platform", platform_thumbnail_url),
        ]

    def supports(self, reference: VideoReference) -> bool:
        return self._config.enabled and reference.platform is Platform.YOUTUBE

    async def build(self, reference: VideoReference, privacy_url: str) -> Optional[PreviewRecord]:
        if not self.supports(reference):
            return None

        title, description = await self._fetch_metadata(reference)
        thumbnail = await self._fetch_thumbnail(reference)
        return PreviewRecord(
            uri=privacy_url,
            title=title,
            description=description,
            thumbnail=thumbnail,
        )

    def _overlay_thumbnail_url(self, reference: VideoReference) -> str:
        source = quote(platform_thumbnail_url(reference), safe="")
        return f"{self._base}/api/og-video-image?thumbnail={source}"

    async def _fetch_metadata(self, reference: VideoReference) -> Tuple[str, str]:
        title = self._config.default_title
        description = self._config.default_description
        url = f"{self._base}/api/metadata?videoId={quote(reference.video_id, safe='')}"
        try:
            result = await self._fetcher.fetch(url)
        except FetchError as exc:
            LOGGER.warning("Metadata fetch failed for %s: %s", reference.video_id, exc)
            return title, description
        if not result.ok:
            LOGGER.warning("Metadata fetch for %s returned %s, using defaults", reference.video_id, result.status)
            return title, description
        try:
            payload = json.loads(result.body.decode("utf-8"))
        except ValueError:
            LOGGER.warning("Metadata for %s is not valid JSON, using defaults", reference.video_id)
            return title, description
        if isinstance(payload, dict):
            title = payload.get("title") or title
            description = payload.get("description") or description
        return title, description

    async def _fetch_thumbnail(self, reference: VideoReference) -> Any:
        for name, source in self._thumbnail_sources:
            url = source(reference)
            try:
                result = await self._fetcher.fetch(url)
            except FetchError as exc:
                LOGGER.warning("Thumbnail (%s) fetch failed: %s", name, exc)
                continue
            if not result.ok or not result.body:
                LOGGER.info("Thumbnail (%s) unavailable: status %s", name, result.status)
                continue
            try:
                return await self._feed.upload_asset(result.body, "image/jpeg")
            except FeedError as exc:
                LOGGER.warning("Thumbnail (%s) upload failed: %s", name, exc)
        return None
