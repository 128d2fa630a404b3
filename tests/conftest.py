# File: tests/conftest.py
from typing import Callable

import pytest

from webgrep.config import CrawlConfig
from webgrep.parser.html_parser import ParsedDocument, parse_html


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


@pytest.fixture()
def make_config() -> Callable[..., CrawlConfig]:
    """
    Return a factory for CrawlConfig with test-friendly defaults:
    no politeness delay and a short per-request timeout.
    """

    def _make(url: str = "http://example.com", **overrides) -> CrawlConfig:
        overrides.setdefault("keyword", "python")
        overrides.setdefault("delay_ms", 0)
        overrides.setdefault("timeout_ms", 2000)
        return CrawlConfig(url=url, **overrides)

    return _make


@pytest.fixture()
def sample_page() -> ParsedDocument:
    """
    Provide a parsed HTML page with internal, external, ignored and
    duplicate links plus description/keywords metas.
    """
    html = (
        "<html><head><title>Sample page</title>"
        '<meta name="description" content="All about snakes">'
        '<meta name="keywords" content="reptiles, python">'
        "</head><body>"
        "<p>Welcome to the zoo.</p>"
        '<a href="/link1">L1</a>'
        '<a href="/link1#top">L1 again</a>'
        '<a href="http://external.com/page">X</a>'
        '<a href="/static/app.css">CSS</a>'
        '<a href="/files/report.pdf">Report</a>'
        '<a href="mailto:zoo@example.com">Mail</a>'
        "<script>var python = 'not visible';</script>"
        "</body></html>"
    )
    return parse_html(html.encode("utf-8"), "http://example.com/")
