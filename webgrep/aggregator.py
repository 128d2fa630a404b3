# File: webgrep/aggregator.py
"""webgrep.aggregator: Накопитель результатов обхода и сборка итогового отчёта."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple, TypedDict

from webgrep.config import CrawlConfig


class ErrorKind(str, Enum):
    """Закрытый набор категорий ошибок при обработке страницы."""

    NETWORK_ERROR = "network_error"
    BLOCKED = "blocked"
    PARSE_ERROR = "parse_error"
    SKIPPED_SIZE = "skipped_size"
    SKIPPED_TYPE = "skipped_type"


class MatchInfo(TypedDict):
    url: str
    count: int


class BlockedInfo(TypedDict):
    url: str
    reason: str


def _zero_counts() -> Dict[ErrorKind, int]:
    return {kind: 0 for kind in ErrorKind}


@dataclass(slots=True)
class CrawlResult:
    """Результаты одного обхода: совпадения, блокировки и счётчики."""

    matches: Dict[str, int] = field(default_factory=dict)
    blocked: Dict[str, str] = field(default_factory=dict)
    error_counts: Dict[ErrorKind, int] = field(default_factory=_zero_counts)
    visited_count: int = 0
    parsed_count: int = 0
    frozen: bool = False

    def _check_open(self) -> None:
        if self.frozen:
            raise RuntimeError("CrawlResult is frozen; the crawl has finished")

    def mark_visited(self) -> None:
        self._check_open()
        self.visited_count += 1

    def mark_parsed(self) -> None:
        self._check_open()
        self.parsed_count += 1

    def add_match(self, url: str, count: int) -> None:
        """Запоминает URL с числом совпадений; нулевые результаты игнорируются."""
        self._check_open()
        if count > 0:
            self.matches[url] = count

    def add_blocked(self, url: str, reason: str) -> None:
        """Фиксирует блокировку; повторная блокировка того же URL не считается дважды."""
        self._check_open()
        if url not in self.blocked:
            self.error_counts[ErrorKind.BLOCKED] += 1
        self.blocked[url] = reason

    def record_error(self, kind: ErrorKind) -> None:
        self._check_open()
        self.error_counts[kind] += 1

    def freeze(self) -> None:
        self.frozen = True

    @property
    def total_matches(self) -> int:
        return sum(self.matches.values())

    def sorted_matches(self) -> List[Tuple[str, int]]:
        """Совпадения по убыванию количества, при равенстве по URL."""
        return sorted(self.matches.items(), key=lambda item: (-item[1], item[0]))


def build_report(result: CrawlResult, config: CrawlConfig) -> Dict[str, Any]:
    """Собирает сериализуемый отчёт: параметры запроса, статистика, результаты."""
    results: List[MatchInfo] = [{"url": url, "count": count} for url, count in result.sorted_matches()]
    blocked: List[BlockedInfo] = [{"url": url, "reason": reason} for url, reason in result.blocked.items()]
    return {
        "query": {
            "url": config.url,
            "keyword": config.keyword,
            "depth": config.depth,
            "mode": config.mode.value,
        },
        "stats": {
            "total_matches": result.total_matches,
            "pages_visited": result.visited_count,
            "pages_parsed": result.parsed_count,
            "pages_blocked": len(result.blocked),
            "errors": {kind.value: result.error_counts[kind] for kind in ErrorKind},
        },
        "results": results,
        "blocked": blocked,
    }
