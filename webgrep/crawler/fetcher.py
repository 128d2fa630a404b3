# webgrep/crawler/fetcher.py
"""
Fetcher module: issues one GET per URL with a byte budget and turns every
outcome into either a :class:`FetchResult` or a typed exception.
"""
from __future__ import annotations

import asyncio
from typing import Mapping, Optional

from aiohttp import ClientError, ClientResponse, ClientSession

from webgrep.crawler.models import FetchResult

_CHUNK_SIZE = 64 * 1024


class FetchError(Exception):
    """Transport-level failure: connection, DNS, TLS, timeout, redirect loop."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


class HttpStatusError(FetchError):
    """The server answered with a non-2xx status."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(url, f"HTTP {status}")
        self.status = status


class ResponseTooLarge(Exception):
    """Declared or downloaded body exceeds the byte budget."""

    def __init__(self, url: str, size: int, limit: int, *, declared: bool) -> None:
        source = "Content-Length" if declared else "body"
        super().__init__(f"{url}: {source} {size} > {limit} bytes")
        self.url = url
        self.size = size
        self.declared = declared


def declared_length(headers: Mapping[str, str]) -> Optional[int]:
    """Parse ``Content-Length``; missing or garbage values give ``None``."""
    raw = headers.get("Content-Length")
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


class Fetcher:
    """GETs URLs through a shared session, following redirects."""

    def __init__(self, session: ClientSession, max_bytes: int) -> None:
        self.session = session
        self.max_bytes = max_bytes

    async def fetch(self, url: str) -> FetchResult:
        """
        Download *url*.

        Raises HttpStatusError for non-2xx answers, ResponseTooLarge when the
        byte budget is exceeded and FetchError for transport failures.
        """
        try:
            async with self.session.get(url, allow_redirects=True) as resp:
                if not 200 <= resp.status < 300:
                    raise HttpStatusError(url, resp.status)
                length = declared_length(resp.headers)
                if length is not None and length > self.max_bytes:
                    raise ResponseTooLarge(url, length, self.max_bytes, declared=True)
                body = await self._read_limited(url, resp)
                return FetchResult(
                    url=url,
                    final_url=str(resp.url),
                    content_type=resp.headers.get("Content-Type"),
                    body=body,
                )
        except asyncio.TimeoutError as exc:
            raise FetchError(url, "timed out") from exc
        except ClientError as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc

    async def _read_limited(self, url: str, resp: ClientResponse) -> bytes:
        body = bytearray()
        async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
            body.extend(chunk)
            if len(body) > self.max_bytes:
                raise ResponseTooLarge(url, len(body), self.max_bytes, declared=False)
        return bytes(body)
