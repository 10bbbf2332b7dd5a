"""Video reference extraction from a post's representations (core domain).

Sources are tried in a fixed order, first hit wins:
1) the external link card URI (stored untruncated as its own field)
2) rich-text link annotation URIs (also complete)
3) the raw body text, which clients may have truncated

Step 3 is off unless explicitly enabled so a privacy link is never built
from a chopped URL.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from core.models import CandidateMessage, VideoReference
from core.patterns import PatternRegistry
from core.resolver import RedirectResolver

LOGGER = logging.getLogger(__name__)

Source = Callable[[CandidateMessage], List[str]]


def _external_source(message: CandidateMessage) -> List[str]:
    return [message.external_uri] if message.external_uri else []


def _link_source(message: CandidateMessage) -> List[str]:
    return [link.uri for link in message.links if link.uri]


def _text_source(message: CandidateMessage) -> List[str]:
    return [message.text] if message.text else []


class ReferenceExtractor:
    """Apply the pattern registry to a post's sources in priority order."""

    def __init__(
        self,
        registry: PatternRegistry,
        resolver: Optional[RedirectResolver] = None,
        allow_text_fallback: bool = False,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        sources: List[Tuple[str, Source]] = [
            ("external", _external_source),
            ("links", _link_source),
        ]
        if allow_text_fallback:
            sources.append(("text", _text_source))
        self._sources = sources

    @property
    def source_names(self) -> List[str]:
        return [name for name, _ in self._sources]

    def extract_from_text(self, raw: str) -> Optional[VideoReference]:
        return self._registry.match(raw)

    async def extract_from(self, message: CandidateMessage) -> Optional[VideoReference]:
        for name, source in self._sources:
            for value in source(message):
                reference = await self._match(value)
                if reference is not None:
                    LOGGER.debug("Found %s reference in %s of %s", reference.platform.value, name, message.uri)
                    return reference
        return None

    async def _match(self, value: str) -> Optional[VideoReference]:
        reference = self._registry.match(value)
        if reference is not None or self._resolver is None:
            return reference

        short_link = self._registry.find_short_link(value)
        if not short_link:
            return None
        resolved = await self._resolver.resolve(short_link)
        if resolved == short_link:
            return None
        return self._registry.match(resolved)
