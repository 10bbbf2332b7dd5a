"""Bluesky client factory for vidprivacy.

We explicitly manage the client's lifecycle (build, then login) so it is
obvious when the session is created.
"""

from __future__ import annotations

import logging
import os

from atproto import AsyncClient
from atproto.exceptions import AtProtocolError
from dotenv import load_dotenv

from core.config import BotIdentity

DEFAULT_SERVICE = "https://bsky.social"


def build_client() -> tuple[AsyncClient, str, str]:
    """Create an AT Protocol client from environment variables.

    We read BLUESKY_HANDLE/BLUESKY_PASSWORD via python-dotenv to keep secrets
    out of the repo. Returns the client with the credentials to log in with.
    """

    load_dotenv()

    handle = os.getenv("BLUESKY_HANDLE")
    password = os.getenv("BLUESKY_PASSWORD")
    service = os.getenv("BLUESKY_SERVICE", DEFAULT_SERVICE)

    # Fail fast on missing credentials.
    if not handle or not password:
        raise RuntimeError("Missing BLUESKY_HANDLE or BLUESKY_PASSWORD in environment")

    logging.getLogger(__name__).info("Initializing Bluesky client for %s", service)

    return AsyncClient(base_url=service), handle, password


async def login(client: AsyncClient, handle: str, password: str) -> BotIdentity:
    """Log in and return the identity replies will be posted as."""

    try:
        profile = await client.login(handle, password)
    except AtProtocolError as exc:
        raise RuntimeError(f"Bluesky login failed for {handle}: {exc}") from exc

    logging.getLogger(__name__).info("Logged in as %s (%s)", profile.handle, profile.did)
    return BotIdentity(handle=profile.handle, did=profile.did)
