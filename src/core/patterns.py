"""Per-platform URL recognizers (core domain).

The registry is an ordered list: the first recognizer that matches wins, so
more specific shapes must be listed before looser ones. Every recognizer
captures only the identifier token and rebuilds a canonical URL from it;
query strings and tracking suffixes are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterable, List, Optional

from core.models import Platform, VideoReference

# Host must not be glued to a preceding word ("notyoutube.com").
_START = r"(?<![\w.-])(?:https?://)?"
_YT_ID = r"(?P<id>[A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"

_SHORT_LINK = re.compile(
    _START
    + r"(?:(?:vm|vt)\.tiktok\.com/[A-Za-z0-9]+|(?:www\.)?tiktok\.com/t/[A-Za-z0-9]+)/?",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Recognizer:
    """One URL shape for one platform."""

    name: str
    platform: Platform
    pattern: re.Pattern
    canonical: str
    subtype: Optional[str] = None

    def match(self, text: str) -> Optional[VideoReference]:
        found = self.pattern.search(text)
        if not found:
            return None
        canonical_url = self.canonical.format(**found.groupdict())
        # The identifier always comes from the canonical URL, parsed by the
        # same pattern that recognized the input.
        reparsed = self.pattern.search(canonical_url)
        if not reparsed:
            return None
        return VideoReference(
            platform=self.platform,
            video_id=reparsed.group("id"),
            canonical_url=canonical_url,
            subtype=self.subtype,
        )


def _compile(body: str) -> re.Pattern:
    return re.compile(_START + body, re.IGNORECASE)


def build_recognizers() -> List[Recognizer]:
    """Return the default recognizers in priority order."""

    return [
        Recognizer(
            name="youtube-watch",
            platform=Platform.YOUTUBE,
            pattern=_compile(
                r"(?:(?:www|m|music)\.)?youtube\.com/watch\?(?:[^\s#]*?&)?v=" + _YT_ID
            ),
            canonical="https://www.youtube.com/watch?v={id}",
            subtype="video",
        ),
        Recognizer(
            name="youtube-short-domain",
            platform=Platform.YOUTUBE,
            pattern=_compile(r"(?:www\.)?youtu\.be/" + _YT_ID),
            canonical="https://youtu.be/{id}",
            subtype="video",
        ),
        Recognizer(
            name="youtube-shorts",
            platform=Platform.YOUTUBE,
            pattern=_compile(r"(?:(?:www|m)\.)?youtube\.com/shorts/" + _YT_ID),
            canonical="https://www.youtube.com/shorts/{id}",
            subtype="short",
        ),
        Recognizer(
            name="youtube-embed",
            platform=Platform.YOUTUBE,
            pattern=_compile(r"(?:(?:www|m)\.)?youtube\.com/(?P<kind>embed|live|v)/" + _YT_ID),
            canonical="https://www.youtube.com/{kind}/{id}",
            subtype="video",
        ),
        Recognizer(
            name="vimeo",
            platform=Platform.VIMEO,
            pattern=_compile(
                r"(?:(?:www|player)\.)?vimeo\.com/(?:video/|channels/[\w-]+/)?(?P<id>\d{6,})(?!\d)"
            ),
            canonical="https://vimeo.com/{id}",
        ),
        Recognizer(
            name="tiktok",
            platform=Platform.TIKTOK,
            pattern=_compile(
                r"(?:(?:www|m)\.)?tiktok\.com/(?P<user>@[\w.-]+)/video/(?P<id>\d{19})(?!\d)"
            ),
            canonical="https://www.tiktok.com/{user}/video/{id}",
        ),
        Recognizer(
            name="twitch-video",
            platform=Platform.TWITCH,
            pattern=_compile(r"(?:(?:www|m)\.)?twitch\.tv/videos/(?P<id>\d{6,})(?!\d)"),
            canonical="https://www.twitch.tv/videos/{id}",
            subtype="video",
        ),
        Recognizer(
            name="twitch-clip",
            platform=Platform.TWITCH,
            pattern=_compile(
                r"(?:(?:(?:www|m)\.)?twitch\.tv/\w+/clip|(?:www\.)?clips\.twitch\.tv)/"
                r"(?P<id>[A-Za-z0-9_-]{10,})(?![A-Za-z0-9_-])"
            ),
            canonical="https://clips.twitch.tv/{id}",
            subtype="clip",
        ),
        Recognizer(
            name="dailymotion",
            platform=Platform.DAILYMOTION,
            pattern=_compile(
                r"(?:www\.)?(?:dailymotion\.com/video|dai\.ly)/(?P<id>[A-Za-z0-9]{5,})(?![A-Za-z0-9])"
            ),
            canonical="https://www.dailymotion.com/video/{id}",
        ),
    ]


class PatternRegistry:
    """Ordered recognizer table; pure, no I/O."""

    def __init__(self, recognizers: Optional[Iterable[Recognizer]] = None) -> None:
        self._recognizers = list(recognizers) if recognizers is not None else build_recognizers()

    @property
    def recognizers(self) -> List[Recognizer]:
        return list(self._recognizers)

    def match(self, text: str) -> Optional[VideoReference]:
        """Return the reference from the first recognizer that matches."""

        if not text:
            return None
        for recognizer in self._recognizers:
            reference = recognizer.match(text)
            if reference is not None:
                return reference
        return None

    def find_short_link(self, text: str) -> Optional[str]:
        """Return the first opaque short-link in text, with a scheme."""

        if not text:
            return None
        found = _SHORT_LINK.search(text)
        if not found:
            return None
        url = found.group(0)
        if not url.lower().startswith("http"):
            url = f"https://{url}"
        return url
