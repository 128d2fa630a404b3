# webgrep/crawler/link_extractor.py
"""
Link filtering and extraction for WebGrep.

Links come from two passes: the parsed document's anchors first, then a
regex sweep over the raw markup that recovers hrefs a lenient parser lost.
"""
from __future__ import annotations

import html
import re
from typing import Iterable, List, Optional, Tuple

from webgrep.parser.html_parser import ParsedDocument
from webgrep.utils import normalize_url

MAX_LINKS_PER_PAGE = 5000

#: Binary but indexable: never ignored even if another rule would match.
KEPT_EXTENSIONS: Tuple[str, ...] = (".pdf", ".doc", ".docx", ".txt")

IGNORED_EXTENSIONS: Tuple[str, ...] = (
    ".css", ".js",
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico",
    ".woff", ".woff2", ".ttf", ".otf",
    ".mp3", ".mp4", ".wav", ".avi", ".mov", ".wmv",
    ".zip", ".rar", ".7z", ".tar.gz",
)

IGNORED_SUBSTRINGS: Tuple[str, ...] = (
    "googleads",
    "doubleclick",
    "facebook.com/sharer",
    "twitter.com/intent/tweet",
    "linkedin.com/share",
    "pinterest.com/pin",
    "/tag/",
    "/tags/",
    "/author/",
)

_HREF_RE = re.compile(r"href\s*=\s*\"([^\"]+)\"", re.IGNORECASE)


class LinkFilter:
    """Denylist of URLs that are not worth fetching.

    False negatives (junk kept) are cheap; false positives lose content,
    so document extensions short-circuit to *keep*.
    """

    def __init__(
        self,
        extra_patterns: Iterable[str] = (),
        *,
        extensions: Iterable[str] = IGNORED_EXTENSIONS,
        substrings: Iterable[str] = IGNORED_SUBSTRINGS,
    ) -> None:
        self.extensions: Tuple[str, ...] = tuple(e.lower() for e in extensions)
        self.substrings: Tuple[str, ...] = tuple(s.lower() for s in substrings) + tuple(
            p.lower() for p in extra_patterns if p
        )

    def is_ignored(self, url: str) -> bool:
        lower = url.lower().split("#", 1)[0].split("?", 1)[0]
        if lower.endswith(KEPT_EXTENSIONS):
            return False
        if lower.endswith(self.extensions):
            return True
        return any(s in lower for s in self.substrings)


_DEFAULT_FILTER = LinkFilter()


def is_ignored_link(url: str) -> bool:
    """Check *url* against the built-in denylist."""
    return _DEFAULT_FILTER.is_ignored(url)


def extract_links(
    doc: ParsedDocument,
    raw_body: bytes,
    base_url: str,
    *,
    link_filter: Optional[LinkFilter] = None,
    max_links: int = MAX_LINKS_PER_PAGE,
) -> List[str]:
    """
    Return normalized, filtered, de-duplicated outbound links of a page.

    Anchors are resolved through the document's base URI; when that yields
    nothing the raw href is resolved against *base_url*.  A regex pass over
    *raw_body* runs only while the cap is not reached.
    """
    flt = link_filter or _DEFAULT_FILTER
    links: List[str] = []
    seen: set[str] = set()

    def _add(candidate: str) -> None:
        link = normalize_url(candidate, base_url)
        if link and link not in seen and not flt.is_ignored(link):
            seen.add(link)
            links.append(link)

    for anchor in doc.anchors:
        if len(links) >= max_links:
            break
        _add(anchor.absolute or anchor.href)

    if len(links) < max_links:
        markup = raw_body.decode("utf-8", errors="replace")
        for match in _HREF_RE.finditer(markup):
            if len(links) >= max_links:
                break
            _add(html.unescape(match.group(1)))

    return links
