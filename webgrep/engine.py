# File: webgrep/engine.py
"""webgrep.engine: Оркестрация запуска обхода для CLI и тестов."""

from __future__ import annotations

import asyncio
import signal
from typing import Optional

from webgrep.aggregator import CrawlResult
from webgrep.config import CrawlConfig
from webgrep.crawler.crawler import AsyncCrawler
from webgrep.logger import logger

__all__ = ["start_crawl"]

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def start_crawl(cfg: CrawlConfig, crawl_timeout: Optional[float] = None) -> CrawlResult:
    """
    Запускает AsyncCrawler в контексте и возвращает CrawlResult.

    SIGINT/SIGTERM и истечение crawl_timeout (секунд) не прерывают работу
    аварийно: обход останавливается, и возвращается частичный результат.

    Raises
    ------
    ConfigurationError
        Если стартовый URL не удаётся нормализовать.
    """
    crawler = AsyncCrawler(cfg)
    loop = asyncio.get_running_loop()

    installed = []
    for sig in _STOP_SIGNALS:
        try:
            loop.add_signal_handler(sig, crawler.stop)
            installed.append(sig)
        except (NotImplementedError, RuntimeError, ValueError):
            # нет поддержки сигналов (Windows или не главный поток)
            logger.debug("Signal %s handler not installed", sig)

    timer = loop.call_later(crawl_timeout, _on_timeout, crawler, crawl_timeout) if crawl_timeout else None
    try:
        async with crawler:
            return await crawler.crawl()
    finally:
        if timer is not None:
            timer.cancel()
        for sig in installed:
            loop.remove_signal_handler(sig)


def _on_timeout(crawler: AsyncCrawler, seconds: float) -> None:
    logger.warning("Crawl did not finish within %s seconds; returning partial results", seconds)
    crawler.stop()
