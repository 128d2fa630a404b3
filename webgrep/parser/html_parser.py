# === FILE: webgrep/parser/html_parser.py ===
"""HTML parsing for WebGrep.

:func:`parse_html` turns a response body into a :class:`ParsedDocument`
exposing exactly what the crawler needs:

* title: document ``<title>`` text or ``""`` if absent.
* body_text: visible text of ``<body>`` (``None`` when the page has no body).
* text: visible text of the whole document.
* meta: ``content`` of a ``<meta name=...>`` tag.
* anchors: every ``<a href>`` with its href resolved against the document's
  base URI (``<base href>`` when present, otherwise the page URL).

Script-like elements are removed before text is collected, so inline
JavaScript never produces keyword hits.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("Anchor", "ParsedDocument", "parse_html")

_INVISIBLE_TAGS = ("script", "style", "noscript", "template")


@dataclass(slots=True, frozen=True)
class Anchor:
    """A single ``<a href>``: raw attribute value and its absolute form."""

    href: str
    absolute: str


@dataclass(slots=True)
class ParsedDocument:
    """Lightweight, already-extracted view of an HTML page."""

    url: str
    base_uri: str
    title: str
    text: str
    body_text: Optional[str]
    anchors: list[Anchor] = field(default_factory=list)
    metas: dict[str, str] = field(default_factory=dict)

    def meta(self, name: str) -> str:
        """Return ``content`` of ``<meta name=name>`` or ``""``."""
        return self.metas.get(name.lower(), "")


def _visible_text(node: Union[BeautifulSoup, Tag]) -> str:
    return " ".join(node.stripped_strings)


def _resolve(base_uri: str, href: str) -> str:
    try:
        return urljoin(base_uri, href)
    except ValueError:
        return ""


def parse_html(body: Union[bytes, str], url: str) -> ParsedDocument:
    """Parse *body* fetched from *url*.

    Raises :class:`bs4.builder.ParserRejectedMarkup` when the markup cannot
    be parsed at all; callers treat that as a parse failure.
    """
    soup = BeautifulSoup(body, "html.parser")

    base_uri = url
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag):
        base_href = base_tag.get("href")
        if isinstance(base_href, str) and base_href.strip():
            base_uri = _resolve(url, base_href.strip()) or url

    title_tag = soup.find("title")
    title = " ".join(title_tag.get_text().split()) if title_tag else ""

    metas: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        if not isinstance(tag, Tag):
            continue
        name, content = tag.get("name"), tag.get("content")
        if isinstance(name, str) and isinstance(content, str):
            metas.setdefault(name.strip().lower(), content)

    anchors: list[Anchor] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        anchors.append(Anchor(href=raw, absolute=_resolve(base_uri, raw) if raw else ""))

    for element in soup(_INVISIBLE_TAGS):
        element.decompose()

    body_tag = soup.body
    return ParsedDocument(
        url=url,
        base_uri=base_uri,
        title=title,
        text=_visible_text(soup),
        body_text=_visible_text(body_tag) if body_tag is not None else None,
        anchors=anchors,
        metas=metas,
    )
