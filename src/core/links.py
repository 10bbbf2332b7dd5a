"""Privacy link construction (core domain)."""

from __future__ import annotations

from urllib.parse import quote

from core.models import Platform, VideoReference

# Characters JavaScript's encodeURIComponent leaves untouched.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def normalize_domain(domain: str) -> str:
    """Strip any scheme and trailing slashes from a configured domain."""

    value = domain.strip()
    for scheme in ("https://", "http://"):
        if value.lower().startswith(scheme):
            value = value[len(scheme):]
            break
    return value.rstrip("/")


def build_privacy_url(reference: VideoReference, domain: str) -> str:
    """Return the outward redirect URL for a video reference.

    YouTube ids are self-sufficient, so only the id is sent; every other
    platform needs its full canonical URL to keep platform routing.
    """

    if reference.platform is Platform.YOUTUBE:
        value = quote(reference.video_id, safe=_URI_COMPONENT_SAFE)
    else:
        value = quote(reference.canonical_url, safe=_URI_COMPONENT_SAFE)
    return f"https://{normalize_domain(domain)}/video?video={value}"
