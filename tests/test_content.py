# File: tests/test_content.py
import io
import zipfile

import pytest
from bs4.builder import ParserRejectedMarkup
from docx import Document
from pypdf.errors import DependencyError

import webgrep.parser.content as content_module
import webgrep.parser.documents as documents_module
from webgrep.parser.content import (
    ContentDispatcher,
    ContentKind,
    extract_text,
    html_text,
    is_challenge_page,
)
from webgrep.parser.documents import (
    DocumentFormat,
    ExtractionError,
    extract_document_text,
    sniff_format,
)
from webgrep.parser.html_parser import parse_html


def _docx_bytes() -> bytes:
    document = Document()
    document.add_paragraph("Quarterly report on python adoption")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Region"
    table.rows[0].cells[1].text = "Sarajevo"
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


# --- html ------------------------------------------------------------------


def test_parse_html_collects_title_metas_and_anchors(sample_page):
    assert sample_page.title == "Sample page"
    assert sample_page.meta("Description") == "All about snakes"
    assert sample_page.meta("missing") == ""
    assert [a.href for a in sample_page.anchors][:2] == ["/link1", "/link1#top"]
    assert sample_page.anchors[0].absolute == "http://example.com/link1"


def test_html_text_joins_title_body_and_metas(sample_page):
    text = html_text(sample_page)
    assert text.startswith("Sample page ")
    assert "Welcome to the zoo." in text
    assert "All about snakes" in text
    assert text.endswith("reptiles, python")
    assert "not visible" not in text


def test_html_text_without_body_uses_whole_document():
    doc = parse_html(b"<title>Notes</title><p>hello python</p>", "http://example.com/")
    assert doc.body_text is None
    assert "hello python" in html_text(doc)


def test_title_whitespace_is_collapsed():
    doc = parse_html(b"<html><head><title>\n  A \t  title </title></head><body></body></html>", "http://x.com/")
    assert doc.title == "A title"
    assert doc.body_text == ""


@pytest.mark.parametrize(
    "html,expected",
    [
        (b"<html><head><title>Just a moment...</title></head><body></body></html>", True),
        (b"<html><body><p>Enable JavaScript and cookies to continue</p></body></html>", True),
        (b"<html><head><title>Welcome</title></head><body>ok</body></html>", False),
    ],
)
def test_is_challenge_page(html, expected):
    assert is_challenge_page(parse_html(html, "http://example.com/")) is expected


# --- dispatch --------------------------------------------------------------


def test_content_kind_from_content_type():
    assert ContentKind.from_content_type("text/html; charset=utf-8") is ContentKind.HTML
    assert ContentKind.from_content_type("application/xhtml+xml") is ContentKind.HTML
    assert ContentKind.from_content_type("application/pdf") is ContentKind.BINARY
    assert ContentKind.from_content_type(None) is ContentKind.BINARY


def test_binary_text_retries_without_hint_when_blank():
    calls = []

    def fake_extractor(body, content_type, name):
        calls.append(content_type)
        return "  " if content_type else "found it"

    dispatcher = ContentDispatcher(fake_extractor)
    assert dispatcher.binary_text(b"data", "application/pdf", "http://x.com/a") == ("found it", False)
    assert calls == ["application/pdf", None]


def test_binary_text_falls_back_to_decoding_on_failure():
    def broken_extractor(body, content_type, name):
        raise ExtractionError("boom")

    dispatcher = ContentDispatcher(broken_extractor)
    text, degraded = dispatcher.binary_text("python inside".encode(), "application/pdf", "http://x.com/a.pdf")
    assert text == "python inside"
    assert degraded is True


def test_extract_html_keeps_parsed_document():
    result = ContentDispatcher().extract(
        b"<html><head><title>T</title></head><body>python</body></html>",
        "text/html",
        "http://example.com/",
    )
    assert result.kind is ContentKind.HTML
    assert result.document is not None
    assert result.degraded is False
    assert "python" in result.text


def test_extract_plain_text_body():
    result = ContentDispatcher().extract(b"hello python", "text/plain; charset=utf-8", "http://x.com/a.txt")
    assert result.kind is ContentKind.BINARY
    assert result.document is None
    assert result.text == "hello python"


def test_extract_rejected_markup_degrades_to_raw_text(monkeypatch):
    def reject(body, url):
        raise ParserRejectedMarkup("unparseable")

    monkeypatch.setattr(content_module, "parse_html", reject)
    result = ContentDispatcher().extract(b"<<python>>", "text/html", "http://example.com/")
    assert result.degraded is True
    assert result.document is None
    assert result.text == "<<python>>"


def test_extract_text_prefers_parsed_document(sample_page):
    assert extract_text(b"ignored", "text/html", "http://example.com/", sample_page) == html_text(sample_page)
    assert extract_text(b"plain words", "text/plain", "http://example.com/a.txt") == "plain words"


# --- documents -------------------------------------------------------------


@pytest.mark.parametrize(
    "body,content_type,name,expected",
    [
        (b"%PDF-1.7 ...", "text/plain", None, DocumentFormat.PDF),
        (b"PK\x03\x04rest", None, "http://x.com/file.bin", DocumentFormat.DOCX),
        (b"abc", "application/pdf", None, DocumentFormat.PDF),
        (b"abc", "TEXT/CSV; charset=utf-8", None, DocumentFormat.TEXT),
        (b"abc", "application/ld+json", None, DocumentFormat.TEXT),
        (b"abc", None, "http://x.com/notes.TXT?dl=1", DocumentFormat.TEXT),
        (b"abc", None, "http://x.com/doc.docx", DocumentFormat.DOCX),
        (b"abc", "application/msword", "http://x.com/old.doc", DocumentFormat.UNKNOWN),
    ],
)
def test_sniff_format(body, content_type, name, expected):
    assert sniff_format(body, content_type, name) is expected


def test_docx_paragraphs_and_tables_are_extracted():
    text = extract_document_text(_docx_bytes(), None, "http://x.com/report.docx")
    assert "Quarterly report on python adoption" in text
    assert "Sarajevo" in text


def test_broken_pdf_raises_extraction_error():
    with pytest.raises(ExtractionError):
        extract_document_text(b"%PDF-1.4\nthis is not really a pdf", "application/pdf", "http://x.com/a.pdf")


def test_broken_zip_raises_extraction_error():
    with pytest.raises(ExtractionError):
        extract_document_text(b"PK\x03\x04 truncated archive", None, None)


def test_docx_with_malformed_package_xml_raises_extraction_error():
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        archive.writestr("[Content_Types].xml", "<not-xml")
    with pytest.raises(ExtractionError):
        extract_document_text(buf.getvalue(), None, "http://x.com/a.docx")


class _BrokenPage:
    def extract_text(self):
        raise TypeError("unsupported operand in content stream")


class _ReaderWithBrokenPage:
    def __init__(self, stream):
        self.pages = [_BrokenPage()]


def _encrypted_reader(stream):
    raise DependencyError("cryptography>=3.1 is required for AES algorithm")


@pytest.mark.parametrize("reader", [_ReaderWithBrokenPage, _encrypted_reader])
def test_pdf_library_failures_raise_extraction_error(monkeypatch, reader):
    monkeypatch.setattr(documents_module, "PdfReader", reader)
    with pytest.raises(ExtractionError):
        extract_document_text(b"%PDF-1.7 ...", "application/pdf", "http://x.com/a.pdf")


def test_legacy_binary_keeps_printable_runs():
    body = b"\x00\x01Hello World\x00\x02ab\x03"
    assert extract_document_text(body, "application/msword", "http://x.com/old.doc") == "Hello World"
