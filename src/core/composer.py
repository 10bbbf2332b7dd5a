"""Reply composition (core domain)."""

from __future__ import annotations

from typing import Optional

from core.config import ReplyConfig
from core.models import (
    CandidateMessage,
    LinkAnnotation,
    PostRef,
    ReplyInstruction,
    VideoReference,
)
from core.preview import PreviewBuilder


def link_annotation(text: str, url: str, start: int = 0) -> LinkAnnotation:
    """Return the UTF-8 byte range of url, searching text from char offset start."""

    start = text.index(url, start)
    byte_start = len(text[:start].encode("utf-8"))
    byte_end = byte_start + len(url.encode("utf-8"))
    return LinkAnnotation(byte_start=byte_start, byte_end=byte_end, uri=url)


def thread_linkage(trigger: CandidateMessage) -> tuple[PostRef, PostRef]:
    """Return (root, parent) so the reply stays inside the existing thread."""

    parent = trigger.ref
    if trigger.is_reply:
        root = trigger.reply_root or trigger.reply_parent
        return root, parent
    return parent, parent


class ReplyComposer:
    """Build the reply text, its link annotation and thread linkage."""

    def __init__(
        self,
        config: Optional[ReplyConfig] = None,
        previews: Optional[PreviewBuilder] = None,
    ) -> None:
        self._config = config or ReplyConfig()
        self._previews = previews

    def render_text(self, privacy_url: str) -> str:
        text = f"{self._config.prefix}{privacy_url}"
        if self._config.footer:
            text = f"{text}\n\n{self._config.footer}"
        return text

    async def compose(
        self,
        trigger: CandidateMessage,
        reference: VideoReference,
        privacy_url: str,
    ) -> ReplyInstruction:
        text = self.render_text(privacy_url)
        annotation = link_annotation(text, privacy_url, start=len(self._config.prefix))
        root, parent = thread_linkage(trigger)

        preview = None
        if self._previews is not None:
            preview = await self._previews.build(reference, privacy_url)

        return ReplyInstruction(
            text=text,
            links=(annotation,),
            root=root,
            parent=parent,
            preview=preview,
        )
