"""Bluesky-to-core post mapping adapter.

This keeps AT Protocol response shapes out of the core pipeline. Anything
that does not look like a post with text and a timestamp is dropped here.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import re
from typing import Any, List, Optional

from core.models import CandidateMessage, LinkAnnotation, PostRef, ThreadNode

LOGGER = logging.getLogger(__name__)

LINK_FEATURE_TYPE = "app.bsky.richtext.facet#link"

# fromisoformat before 3.11 only takes 3 or 6 fractional digits.
_FRACTION = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parse an AT Protocol datetime string into an aware UTC datetime."""

    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, str) and raw:
        text = raw.strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        text = _FRACTION.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text)
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _strong_ref(raw: Any) -> Optional[PostRef]:
    uri = getattr(raw, "uri", None)
    cid = getattr(raw, "cid", None)
    if not isinstance(uri, str) or not isinstance(cid, str):
        return None
    return PostRef(uri=uri, cid=cid)


def _external_uri(embed: Any) -> Optional[str]:
    if embed is None:
        return None
    external = getattr(embed, "external", None)
    if external is None:
        # recordWithMedia wraps the link card in "media".
        external = getattr(getattr(embed, "media", None), "external", None)
    uri = getattr(external, "uri", None)
    return uri if isinstance(uri, str) and uri else None


def _link_annotations(facets: Any) -> List[LinkAnnotation]:
    links: List[LinkAnnotation] = []
    for facet in facets or []:
        index = getattr(facet, "index", None)
        byte_start = getattr(index, "byte_start", None)
        byte_end = getattr(index, "byte_end", None)
        if not isinstance(byte_start, int) or not isinstance(byte_end, int):
            continue
        for feature in getattr(facet, "features", None) or []:
            feature_type = getattr(feature, "py_type", LINK_FEATURE_TYPE)
            uri = getattr(feature, "uri", None)
            if feature_type == LINK_FEATURE_TYPE and isinstance(uri, str) and uri:
                links.append(LinkAnnotation(byte_start=byte_start, byte_end=byte_end, uri=uri))
    return links


def build_message(post: Any) -> Optional[CandidateMessage]:
    """Build a CandidateMessage from a PostView, or None if it is malformed."""

    uri = getattr(post, "uri", None)
    cid = getattr(post, "cid", None)
    record = getattr(post, "record", None)
    author = getattr(post, "author", None)
    text = getattr(record, "text", None)
    if not isinstance(uri, str) or not isinstance(cid, str) or not isinstance(text, str):
        LOGGER.debug("Dropping post without uri/cid/text: %r", uri)
        return None

    created_at = parse_timestamp(getattr(record, "created_at", None))
    if created_at is None:
        LOGGER.debug("Dropping post %s with unreadable createdAt", uri)
        return None

    # The hydrated view embed is preferred; the raw record embed is the
    # same data before the appview resolved it.
    external_uri = _external_uri(getattr(post, "embed", None)) or _external_uri(
        getattr(record, "embed", None)
    )

    reply = getattr(record, "reply", None)
    reply_root = _strong_ref(getattr(reply, "root", None)) if reply else None
    reply_parent = _strong_ref(getattr(reply, "parent", None)) if reply else None
    if reply_parent is None:
        reply_root = None

    return CandidateMessage(
        uri=uri,
        cid=cid,
        author_did=str(getattr(author, "did", "") or ""),
        author_handle=str(getattr(author, "handle", "") or ""),
        text=text,
        created_at=created_at,
        external_uri=external_uri,
        links=tuple(_link_annotations(getattr(record, "facets", None))),
        reply_root=reply_root,
        reply_parent=reply_parent,
    )


def build_messages(posts: Any) -> List[CandidateMessage]:
    messages: List[CandidateMessage] = []
    for post in posts or []:
        message = build_message(post)
        if message is not None:
            messages.append(message)
    return messages


def build_thread(thread: Any) -> Optional[ThreadNode]:
    """Build a ThreadNode from a thread view; not-found/blocked posts give None."""

    post = getattr(thread, "post", None)
    if post is None:
        return None
    message = build_message(post)
    if message is None:
        return None
    replies = []
    for reply in getattr(thread, "replies", None) or []:
        node = build_thread(reply)
        if node is not None:
            replies.append(node)
    return ThreadNode(message=message, replies=tuple(replies))
