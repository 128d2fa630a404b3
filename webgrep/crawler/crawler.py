# === FILE: webgrep/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import time
from collections import defaultdict
from typing import Dict, List, Optional, Set

from aiohttp import ClientSession, ClientTimeout, TCPConnector

from webgrep.aggregator import CrawlResult, ErrorKind
from webgrep.config import ConfigurationError, CrawlConfig
from webgrep.crawler.fetcher import Fetcher, FetchError, HttpStatusError, ResponseTooLarge
from webgrep.crawler.link_extractor import LinkFilter, extract_links
from webgrep.crawler.models import FetchResult, FrontierItem
from webgrep.logger import logger
from webgrep.matcher import count_matches
from webgrep.parser.content import (
    CHALLENGE_REASON,
    ContentDispatcher,
    ContentKind,
    ExtractedContent,
    is_challenge_page,
)
from webgrep.utils import extract_host, normalize_url

__all__ = ("AsyncCrawler", "HostThrottle")

_BLOCKED_STATUS = (403, 429)


class HostThrottle:
    """Enforces a minimum spacing between two requests to the same host."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._last_request_ts: Dict[str, float] = {}

    async def wait(self, host: str) -> None:
        if self.delay <= 0:
            return
        async with self._locks[host]:
            last = self._last_request_ts.get(host)
            if last is not None:
                wait = self.delay - (time.monotonic() - last)
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_request_ts[host] = time.monotonic()


class AsyncCrawler:
    """Breadth-first keyword crawler bounded by depth, page and byte budgets."""

    def __init__(
        self,
        config: CrawlConfig,
        *,
        dispatcher: Optional[ContentDispatcher] = None,
        link_filter: Optional[LinkFilter] = None,
    ) -> None:
        self.config = config
        self.seed = normalize_url(config.url)
        self.seed_host = extract_host(self.seed)
        if not self.seed or not self.seed_host:
            raise ConfigurationError(f"Cannot resolve start URL: {config.url!r}")
        self.dispatcher = dispatcher or ContentDispatcher()
        self.link_filter = link_filter or LinkFilter(config.ignored_link_patterns)
        self.visited: Set[str] = set()
        self.result = CrawlResult()
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None
        self._throttle = HostThrottle(config.delay_ms / 1000)
        self._stop_requested = False
        self._stop_event: Optional[asyncio.Event] = None

    async def __aenter__(self) -> AsyncCrawler:
        connector = TCPConnector(ssl=False) if self.config.insecure_tls else None
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.timeout_seconds),
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": self.config.accept,
                "Accept-Language": self.config.accept_language,
            },
            connector=connector,
            raise_for_status=False,
        )
        self.fetcher = Fetcher(self.session, self.config.max_bytes)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    def stop(self) -> None:
        """Ask the crawl to finish: no further items are dequeued."""
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    async def crawl(self) -> CrawlResult:
        """Run the traversal and return the frozen result (partial if stopped)."""
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        logger.info("Crawl started: %s (keyword=%r, mode=%s)", self.seed, self.config.keyword, self.config.mode.value)
        start = time.monotonic()

        queue: asyncio.Queue[FrontierItem] = asyncio.Queue()
        self.visited.add(self.seed)
        queue.put_nowait(FrontierItem(self.seed, 0))

        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()
        workers = [asyncio.create_task(self._worker(queue)) for _ in range(self.config.concurrency)]
        join_task = asyncio.create_task(queue.join())
        stop_task = asyncio.create_task(self._stop_event.wait())
        try:
            await asyncio.wait({join_task, stop_task, *workers}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (join_task, stop_task, *workers):
                task.cancel()
            outcomes = await asyncio.gather(join_task, stop_task, *workers, return_exceptions=True)
            self.result.freeze()

        for outcome in outcomes:
            if isinstance(outcome, Exception) and not isinstance(outcome, asyncio.CancelledError):
                raise outcome

        duration = time.monotonic() - start
        logger.info(
            "Crawl finished: %d pages visited, %d matched in %.2f s%s",
            self.result.visited_count,
            len(self.result.matches),
            duration,
            " (stopped early)" if self._stop_requested else "",
        )
        return self.result

    async def _worker(self, queue: asyncio.Queue[FrontierItem]) -> None:
        while True:
            item = await queue.get()
            try:
                if self._stop_requested or self.result.visited_count >= self.config.max_pages:
                    continue
                await self._process(item, queue)
            finally:
                queue.task_done()

    async def _process(self, item: FrontierItem, queue: asyncio.Queue[FrontierItem]) -> None:
        self.result.mark_visited()
        await self._throttle.wait(extract_host(item.url))
        logger.debug("Fetching %s (depth %d)", item.url, item.depth)

        response = await self._fetch(item)
        if response is None:
            return

        if self._is_skipped_type(response.content_type):
            logger.info("Skipped content type %s: %s", response.content_type, item.url)
            self.result.record_error(ErrorKind.SKIPPED_TYPE)
            return

        if response.final_url != response.url:
            logger.debug("Redirected %s -> %s", response.url, response.final_url)
        content = self._extract(item.url, response)
        if content.degraded:
            self.result.record_error(ErrorKind.PARSE_ERROR)
        else:
            self.result.mark_parsed()

        links: List[str] = []
        doc = content.document
        if doc is not None:
            if is_challenge_page(doc):
                logger.info("Bot challenge at %s", item.url)
                self.result.add_blocked(item.url, CHALLENGE_REASON)
            if item.depth < self.config.depth:
                links = extract_links(
                    doc,
                    response.body,
                    item.url,
                    link_filter=self.link_filter,
                    max_links=self.config.max_links_per_page,
                )

        count = count_matches(content.text, self.config.keyword, self.config.mode)
        if count > 0:
            logger.debug("%d match(es) at %s", count, item.url)
            self.result.add_match(item.url, count)

        if item.depth < self.config.depth:
            self._admit(links, item.depth + 1, queue)

    def _extract(self, url: str, response: FetchResult) -> ExtractedContent:
        try:
            return self.dispatcher.extract(response.body, response.content_type, url)
        except Exception as exc:
            # unclassified extractor errors degrade the page, never the crawl
            logger.warning("Extraction failed for %s: %r", url, exc)
            return ExtractedContent(
                text=response.body.decode("utf-8", errors="replace"),
                kind=ContentKind.from_content_type(response.content_type),
                degraded=True,
            )

    async def _fetch(self, item: FrontierItem) -> Optional[FetchResult]:
        assert self.fetcher is not None
        try:
            return await self.fetcher.fetch(item.url)
        except ResponseTooLarge as exc:
            logger.info("Skipped by size: %s", exc)
            self.result.record_error(ErrorKind.SKIPPED_SIZE)
        except HttpStatusError as exc:
            if exc.status in _BLOCKED_STATUS:
                reason = f"HTTP {exc.status} (Access Denied/Rate Limited)"
                logger.info("Blocked %s: %s", item.url, reason)
                self.result.add_blocked(item.url, reason)
            else:
                logger.warning("Failed %s", exc)
                self.result.record_error(ErrorKind.NETWORK_ERROR)
        except FetchError as exc:
            logger.warning("Failed %s", exc)
            self.result.record_error(ErrorKind.NETWORK_ERROR)
        return None

    def _admit(self, links: List[str], depth: int, queue: asyncio.Queue[FrontierItem]) -> None:
        # No await between check and insert: admission is atomic across workers.
        for link in links:
            if not self.config.allow_external and extract_host(link) != self.seed_host:
                continue
            if link in self.visited or len(self.visited) >= self.config.max_pages:
                continue
            self.visited.add(link)
            queue.put_nowait(FrontierItem(link, depth))

    def _is_skipped_type(self, content_type: Optional[str]) -> bool:
        ct = (content_type or "").split(";", 1)[0].strip().lower()
        return bool(ct) and any(ct.startswith(prefix.lower()) for prefix in self.config.skip_content_types)

