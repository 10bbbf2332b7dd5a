"""Application entry point for the vidprivacy bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.bluesky_feed import BlueskyFeed
from adapters.http_fetcher import UrllibFetcher
from client import build_client, login
from core.composer import ReplyComposer
from core.config import BotIdentity, DedupConfig, PreviewConfig, ReplyConfig, ScanConfig
from core.dedup import DuplicateGuard, ProcessedCache
from core.extractor import ReferenceExtractor
from core.patterns import PatternRegistry
from core.preview import PreviewBuilder
from core.processor import ScanCycleController
from core.resolver import RedirectResolver
from core.thread import ThreadResolver

NAME = "VIDPRIVACY"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/vidprivacy.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)
    # httpx logs every request at INFO; keep it to warnings.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_controller(feed: BlueskyFeed, identity: BotIdentity) -> ScanCycleController:
    """Wire the core components from settings."""

    fetcher = UrllibFetcher(timeout=settings.HTTP_TIMEOUT_SECONDS)
    scan_config = ScanConfig(
        hashtag=settings.HASHTAG,
        privacy_domain=settings.PRIVACY_DOMAIN,
        search_limit=settings.SEARCH_LIMIT,
        fallback_limit=settings.FALLBACK_LIMIT,
        max_age_hours=settings.MAX_AGE_HOURS,
        dispatch_delay_seconds=settings.DISPATCH_DELAY_SECONDS,
        fallback_delay_seconds=settings.FALLBACK_DELAY_SECONDS,
        allow_text_fallback=settings.ALLOW_TEXT_FALLBACK,
    )
    cache = ProcessedCache.from_config(
        DedupConfig(
            cache_capacity=settings.DEDUP_CACHE_CAPACITY,
            keep_fraction=settings.DEDUP_KEEP_FRACTION,
        )
    )
    extractor = ReferenceExtractor(
        PatternRegistry(),
        resolver=RedirectResolver(fetcher),
        allow_text_fallback=scan_config.allow_text_fallback,
    )
    previews = PreviewBuilder(
        fetcher,
        feed,
        settings.PRIVACY_DOMAIN,
        PreviewConfig(enabled=settings.PREVIEW_ENABLED),
    )
    composer = ReplyComposer(
        ReplyConfig(prefix=settings.REPLY_PREFIX, footer=settings.REPLY_FOOTER),
        previews=previews,
    )
    return ScanCycleController(
        feed=feed,
        guard=DuplicateGuard(feed, identity, cache),
        thread_resolver=ThreadResolver(feed, extractor),
        composer=composer,
        config=scan_config,
        identity=identity,
    )


async def _connect() -> tuple[BlueskyFeed, BotIdentity]:
    client, handle, password = build_client()
    identity = await login(client, handle, password)
    return BlueskyFeed(client), identity


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logging.getLogger(__name__).error("Scan cycle crashed", exc_info=exc)


async def _run_forever(controller: ScanCycleController, interval: float) -> None:
    logger = logging.getLogger(__name__)
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers.
            pass

    # Each tick starts an independent cycle; the controller skips a tick
    # while the previous cycle is still running.
    in_flight: set[asyncio.Task] = set()
    while not stop.is_set():
        task = asyncio.create_task(controller.run_cycle())
        in_flight.add(task)
        task.add_done_callback(in_flight.discard)
        task.add_done_callback(_log_task_failure)
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue

    logger.info("Shutdown requested; no new scan cycles will start")
    for task in list(in_flight):
        task.cancel()


async def _run_async() -> None:
    feed, identity = await _connect()
    controller = build_controller(feed, identity)
    logging.getLogger(__name__).info(
        "Monitoring %s every %ss", settings.HASHTAG, settings.SCAN_INTERVAL_SECONDS
    )
    await _run_forever(controller, settings.SCAN_INTERVAL_SECONDS)


async def _once_async() -> None:
    feed, identity = await _connect()
    controller = build_controller(feed, identity)
    await controller.run_cycle()


def _run() -> None:
    _print_banner()
    _configure_logging()
    logging.getLogger(__name__).info("Starting vidprivacy")
    asyncio.run(_run_async())


def _once() -> None:
    _configure_logging()
    logging.getLogger(__name__).info("Running a single scan cycle")
    asyncio.run(_once_async())


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="vidprivacy")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot and scan on an interval")
    subparsers.add_parser("once", help="Run a single scan cycle (for external schedulers)")

    args = parser.parse_args(argv)
    if args.command == "once":
        _once()
        return
    _run()


if __name__ == "__main__":
    main()
