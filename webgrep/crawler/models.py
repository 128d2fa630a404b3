# webgrep/crawler/models.py
"""
Data models for the WebGrep crawler.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True, frozen=True)
class FrontierItem:
    """A normalized URL waiting in the frontier, with its link distance from the seed."""

    url: str
    depth: int


@dataclass(slots=True)
class FetchResult:
    """Successful (2xx) response: final URL after redirects, content type and body."""

    url: str
    final_url: str
    content_type: Optional[str]
    body: bytes
