"""Plain-text extraction for non-HTML resources (PDF, DOCX, plain text)."""
from __future__ import annotations

import io
import re
import zipfile
import zlib
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from docx import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError
from lxml.etree import LxmlError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from webgrep.logger import logger

__all__ = ["DocumentFormat", "ExtractionError", "extract_document_text", "sniff_format"]

_DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
_TEXT_MIMES = {"application/json", "application/xml", "application/javascript", "application/rtf"}
_PRINTABLE_RUN_RE = re.compile(r"[^\x00-\x08\x0b\x0c\x0e-\x1f\x7f�]{4,}")


class ExtractionError(Exception):
    """The document could not be turned into text."""


class DocumentFormat(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    TEXT = "text"
    UNKNOWN = "unknown"


def sniff_format(body: bytes, content_type: Optional[str], resource_name: Optional[str]) -> DocumentFormat:
    """Classify a body: magic bytes first, then the content-type hint, then the name."""
    if body.startswith(b"%PDF-"):
        return DocumentFormat.PDF
    if body.startswith(b"PK\x03\x04"):
        # Only DOCX is supported among ZIP-based formats.
        return DocumentFormat.DOCX

    if content_type:
        ct = content_type.split(";", 1)[0].strip().lower()
        if ct == "application/pdf":
            return DocumentFormat.PDF
        if ct == _DOCX_MIME:
            return DocumentFormat.DOCX
        if ct.startswith("text/") or ct in _TEXT_MIMES or ct.endswith(("+xml", "+json")):
            return DocumentFormat.TEXT

    if resource_name:
        path = urlsplit(resource_name).path.lower()
        if path.endswith(".pdf"):
            return DocumentFormat.PDF
        if path.endswith(".docx"):
            return DocumentFormat.DOCX
        if path.endswith((".txt", ".csv", ".md", ".json", ".xml")):
            return DocumentFormat.TEXT

    return DocumentFormat.UNKNOWN


# pypdf raises its own hierarchy while opening; malformed content streams
# surface from extract_text as plain Python errors
_PDF_ERRORS = (PyPdfError, ValueError, OSError, KeyError, TypeError, IndexError, AttributeError, zlib.error)
_DOCX_ERRORS = (PackageNotFoundError, zipfile.BadZipFile, LxmlError, KeyError, ValueError)


def _pdf_text(body: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(body))
        parts = [page.extract_text() or "" for page in reader.pages]
    except _PDF_ERRORS as exc:
        raise ExtractionError(f"PDF parse failed: {exc}") from exc
    return "\n\n".join(p for p in parts if p)


def _docx_text(body: bytes) -> str:
    try:
        document = DocxDocument(io.BytesIO(body))
        parts = [p.text for p in document.paragraphs if p.text]
        for table in document.tables:
            for row in table.rows:
                parts.extend(cell.text for cell in row.cells if cell.text)
    except _DOCX_ERRORS as exc:
        raise ExtractionError(f"DOCX parse failed: {exc}") from exc
    return "\n".join(parts)


def _printable_runs(body: bytes) -> str:
    """Best-effort text for legacy binaries (e.g. ``.doc``): keep printable runs."""
    decoded = body.decode("utf-8", errors="replace")
    return " ".join(m.group(0).strip() for m in _PRINTABLE_RUN_RE.finditer(decoded) if m.group(0).strip())


def extract_document_text(
    body: bytes,
    content_type: Optional[str] = None,
    resource_name: Optional[str] = None,
) -> str:
    """
    Extract plain text from a non-HTML document.

    *content_type* and *resource_name* are hints only; magic bytes win.
    Raises :class:`ExtractionError` when a recognised format fails to parse.
    """
    fmt = sniff_format(body, content_type, resource_name)
    logger.debug("Extracting %s text from %s (%d bytes)", fmt.value, resource_name, len(body))
    if fmt is DocumentFormat.PDF:
        return _pdf_text(body)
    if fmt is DocumentFormat.DOCX:
        return _docx_text(body)
    if fmt is DocumentFormat.TEXT:
        return body.decode("utf-8", errors="replace")
    return _printable_runs(body)
