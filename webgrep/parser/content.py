"""
Content dispatch: decide once per response whether a body is HTML or a
binary document, and turn it into searchable plain text.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from bs4.builder import ParserRejectedMarkup

from webgrep.logger import logger
from webgrep.parser.documents import ExtractionError, extract_document_text
from webgrep.parser.html_parser import ParsedDocument, parse_html

__all__ = [
    "CHALLENGE_REASON",
    "ContentDispatcher",
    "ContentKind",
    "ExtractedContent",
    "extract_text",
    "html_text",
    "is_challenge_page",
]

CHALLENGE_REASON = "Cloudflare/Bot protection challenge"
_CHALLENGE_TITLE = "Just a moment..."
_CHALLENGE_TEXT = "Enable JavaScript and cookies to continue"

DocumentExtractor = Callable[[bytes, Optional[str], Optional[str]], str]


class ContentKind(str, Enum):
    HTML = "html"
    BINARY = "binary"

    @classmethod
    def from_content_type(cls, content_type: Optional[str]) -> "ContentKind":
        ct = (content_type or "").lower()
        if "text/html" in ct or "application/xhtml+xml" in ct:
            return cls.HTML
        return cls.BINARY


@dataclass(slots=True, frozen=True)
class ExtractedContent:
    """Text of one response plus the parsed document when it was HTML.

    ``degraded`` is set when the structured path failed and ``text`` comes
    from a raw-bytes fallback.
    """

    text: str
    kind: ContentKind
    document: Optional[ParsedDocument] = None
    degraded: bool = False


def html_text(doc: ParsedDocument) -> str:
    """Title, visible body text and the description/keywords metas."""
    body = doc.body_text if doc.body_text is not None else doc.text
    return " ".join((doc.title, body, doc.meta("description"), doc.meta("keywords")))


def is_challenge_page(doc: ParsedDocument) -> bool:
    return _CHALLENGE_TITLE in doc.title or _CHALLENGE_TEXT in doc.text


def _decode(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


class ContentDispatcher:
    """Routes a response body to the HTML parser or the document extractor."""

    def __init__(self, document_extractor: DocumentExtractor = extract_document_text) -> None:
        self._extract_document = document_extractor

    def binary_text(self, body: bytes, content_type: Optional[str], url: str) -> tuple[str, bool]:
        """Return ``(text, degraded)`` for a non-HTML body.

        A blank result with the content-type hint is retried without it;
        an extraction failure falls back to decoding the raw bytes.
        """
        try:
            text = self._extract_document(body, content_type, url)
            if not text or not text.strip():
                text = self._extract_document(body, None, url)
        except ExtractionError as exc:
            logger.info("Text extraction failed for %s: %s", url, exc)
            return _decode(body), True
        return text, False

    def extract(self, body: bytes, content_type: Optional[str], url: str) -> ExtractedContent:
        kind = ContentKind.from_content_type(content_type)
        if kind is ContentKind.BINARY:
            text, degraded = self.binary_text(body, content_type, url)
            return ExtractedContent(text=text, kind=kind, degraded=degraded)

        try:
            doc = parse_html(body, url)
        except ParserRejectedMarkup as exc:
            logger.info("HTML parse failed for %s: %s", url, exc)
            return ExtractedContent(text=_decode(body), kind=kind, degraded=True)
        return ExtractedContent(text=html_text(doc), kind=kind, document=doc)


_DEFAULT_DISPATCHER = ContentDispatcher()


def extract_text(
    body: bytes,
    content_type: Optional[str],
    url: str,
    doc: Optional[ParsedDocument] = None,
) -> str:
    """Searchable text of a response; uses *doc* when the body is HTML."""
    if doc is not None and ContentKind.from_content_type(content_type) is ContentKind.HTML:
        return html_text(doc)
    text, _ = _DEFAULT_DISPATCHER.binary_text(body, content_type, url)
    return text
