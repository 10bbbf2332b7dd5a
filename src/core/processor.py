"""Scan cycle orchestration.

This module is integration-agnostic. It only relies on ports for the feed
and outbound fetches, enabling other networks or schedulers without changes
here.

One cycle runs in a strict order:
1) List candidates (tag search, falling back to the home timeline)
2) Drop stale posts, posts without the tag, and the bot's own posts
3) For each remaining post, sequentially:
   duplicate guard -> video lookup -> privacy link -> compose -> post -> record
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from enum import Enum
import logging
from typing import Awaitable, Callable, List, Optional

from core.composer import ReplyComposer
from core.config import BotIdentity, ScanConfig
from core.dedup import DuplicateGuard
from core.links import build_privacy_url
from core.models import CandidateMessage, CycleReport
from core.ports import FeedError, FeedPort
from core.thread import ThreadResolver

LOGGER = logging.getLogger(__name__)


class Outcome(str, Enum):
    REPLIED = "replied"
    SKIPPED = "skipped"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanCycleController:
    """Runs scan cycles; at most one at a time."""

    def __init__(
        self,
        feed: FeedPort,
        guard: DuplicateGuard,
        thread_resolver: ThreadResolver,
        composer: ReplyComposer,
        config: ScanConfig,
        identity: BotIdentity,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._feed = feed
        self._guard = guard
        self._threads = thread_resolver
        self._composer = composer
        self._config = config
        self._identity = identity
        self._sleep = sleep
        self._clock = clock
        self._running = False
        self._last_dispatch: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._running

    async def run_cycle(self) -> CycleReport:
        """Run one pass over the newest candidates."""

        if self._running:
            LOGGER.info("Scan cycle already in progress, skipping this trigger")
            return CycleReport(busy=True)

        self._running = True
        report = CycleReport()
        try:
            candidates = await self._list_candidates(report)
            if candidates is None:
                return report
            report.candidates = len(candidates)

            fresh = self._filter(candidates)
            report.fresh = len(fresh)

            # Sequential: each reply is recorded before the next candidate is
            # checked.
            for message in fresh:
                try:
                    outcome = await self.handle(message)
                except Exception:
                    LOGGER.exception("Error while processing %s", message.uri)
                    outcome = Outcome.FAILED

                if outcome is Outcome.REPLIED:
                    report.replied += 1
                    report.replied_uris.append(message.uri)
                elif outcome is Outcome.FAILED:
                    report.failed += 1
                else:
                    report.skipped += 1
        finally:
            self._running = False

        LOGGER.info(
            "Scan cycle complete: candidates=%s, fresh=%s, replied=%s, skipped=%s, failed=%s",
            report.candidates,
            report.fresh,
            report.replied,
            report.skipped,
            report.failed,
        )
        return report

    async def handle(self, message: CandidateMessage) -> Outcome:
        """Process one tagged post through the reply pipeline."""

        if not await self._guard.should_process(message):
            return Outcome.SKIPPED

        reference = await self._threads.resolve_video_source(message)
        if reference is None:
            LOGGER.info("No supported video found for %s", message.uri)
            return Outcome.SKIPPED

        privacy_url = build_privacy_url(reference, self._config.privacy_domain)
        LOGGER.info(
            "Creating privacy link for %s %s: %s",
            reference.platform.value,
            reference.video_id,
            privacy_url,
        )
        reply = await self._composer.compose(message, reference, privacy_url)

        await self._pace()
        self._last_dispatch = self._clock()
        try:
            reply_uri = await self._feed.post_reply(reply)
        except FeedError as exc:
            LOGGER.error("Failed to post reply to %s: %s", message.uri, exc)
            return Outcome.FAILED

        self._guard.mark_handled(message)
        LOGGER.info("Replied to %s with %s", message.uri, reply_uri)
        return Outcome.REPLIED

    async def _pace(self) -> None:
        """Wait out whatever is left of the delay since the previous post."""

        delay = self._config.dispatch_delay_seconds
        if delay <= 0 or self._last_dispatch is None:
            return
        remaining = delay - (self._clock() - self._last_dispatch).total_seconds()
        if remaining > 0:
            await self._sleep(remaining)

    async def _list_candidates(self, report: CycleReport) -> Optional[List[CandidateMessage]]:
        try:
            return await self._feed.search_candidates(self._config.hashtag, self._config.search_limit)
        except FeedError as exc:
            LOGGER.warning("Tag search failed, falling back to timeline: %s", exc)

        report.used_fallback = True
        await self._sleep(self._config.fallback_delay_seconds)
        try:
            return await self._feed.list_timeline(self._config.fallback_limit)
        except FeedError as exc:
            LOGGER.error("Timeline fallback failed, ending cycle early: %s", exc)
            return None

    def _filter(self, candidates: List[CandidateMessage]) -> List[CandidateMessage]:
        cutoff = self._clock() - timedelta(hours=self._config.max_age_hours)
        tag = self._config.hashtag.lower()
        fresh: List[CandidateMessage] = []
        for message in candidates:
            if message.created_at <= cutoff:
                continue
            if tag not in message.text.lower():
                continue
            if self._identity.owns(message.author_did, message.author_handle):
                continue
            fresh.append(message)
        return fresh
