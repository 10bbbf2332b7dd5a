"""Short-link redirect resolution (core domain)."""

from __future__ import annotations

import logging

from core.ports import FetchError, FetchPort

LOGGER = logging.getLogger(__name__)


class RedirectResolver:
    """Resolve an opaque short-link to the URL it redirects to.

    Exactly one fetch is made and never retried. Any failure returns the
    original URL so callers degrade to whatever the unresolved form yields.
    """

    def __init__(self, fetcher: FetchPort) -> None:
        self._fetcher = fetcher

    async def resolve(self, url: str) -> str:
        try:
            result = await self._fetcher.fetch(url)
        except FetchError as exc:
            LOGGER.warning("Redirect resolution failed for %s: %s", url, exc)
            return url
        if not result.url or result.url == url:
            LOGGER.info("No redirect for %s", url)
            return url
        LOGGER.info("Resolved %s -> %s", url, result.url)
        return result.url
