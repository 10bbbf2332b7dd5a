"""Outbound HTTP adapter.

Implements the core FetchPort with urllib; redirects are followed by the
default opener and the final URL is reported back.
"""

from __future__ import annotations

import asyncio
import http.client
import urllib.error
import urllib.request

from core.models import FetchResult
from core.ports import FetchError

USER_AGENT = "vidprivacy-bot/0.1 (+https://videoprivacy.org)"


class UrllibFetcher:
    """Blocking urllib calls moved off the event loop with to_thread."""

    def __init__(self, timeout: float = 10.0, max_bytes: int = 5 * 1024 * 1024) -> None:
        self._timeout = timeout
        self._max_bytes = max_bytes

    async def fetch(self, url: str) -> FetchResult:
        return await asyncio.to_thread(self._fetch_blocking, url)

    def _fetch_blocking(self, url: str) -> FetchResult:
        request = urllib.request.Request(url, method="GET")
        request.add_header("User-Agent", USER_AGENT)
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                return FetchResult(
                    url=response.geturl(),
                    status=response.status,
                    content_type=response.headers.get("Content-Type"),
                    body=response.read(self._max_bytes),
                )
        except urllib.error.HTTPError as e:
            return self._error_result(url, e)
        except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError, ValueError) as e:
            raise FetchError(f"GET {url} failed: {e}") from e

    def _error_result(self, url: str, e: urllib.error.HTTPError) -> FetchResult:
        # Non-2xx still carries a final URL and status the caller may use.
        try:
            body = e.read(self._max_bytes)
        except (http.client.HTTPException, OSError, ValueError) as read_error:
            raise FetchError(f"GET {url} failed reading {e.code} body: {read_error}") from read_error
        finally:
            e.close()
        return FetchResult(
            url=e.geturl() or url,
            status=e.code,
            content_type=e.headers.get("Content-Type") if e.headers else None,
            body=body,
        )
