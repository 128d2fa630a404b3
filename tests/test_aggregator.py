# File: tests/test_aggregator.py
import json

import pytest

from webgrep.aggregator import CrawlResult, ErrorKind, build_report
from webgrep.report import dumps_json, render_html, render_json, render_text


@pytest.fixture()
def finished_result() -> CrawlResult:
    result = CrawlResult()
    for _ in range(4):
        result.mark_visited()
    for _ in range(3):
        result.mark_parsed()
    result.add_match("http://example.com/b", 2)
    result.add_match("http://example.com/a", 2)
    result.add_match("http://example.com/c", 5)
    result.add_match("http://example.com/none", 0)
    result.add_blocked("http://example.com/private", "HTTP 403 (Access Denied/Rate Limited)")
    result.record_error(ErrorKind.NETWORK_ERROR)
    result.freeze()
    return result


def test_new_result_has_every_error_kind_at_zero():
    result = CrawlResult()
    assert result.error_counts == {kind: 0 for kind in ErrorKind}
    assert result.total_matches == 0
    assert result.sorted_matches() == []


def test_zero_counts_are_not_stored(finished_result):
    assert "http://example.com/none" not in finished_result.matches
    assert finished_result.total_matches == 9


def test_blocked_url_counted_once():
    result = CrawlResult()
    result.add_blocked("http://example.com/x", "HTTP 403 (Access Denied/Rate Limited)")
    result.add_blocked("http://example.com/x", "Cloudflare/Bot protection challenge")
    assert result.error_counts[ErrorKind.BLOCKED] == 1
    assert result.blocked["http://example.com/x"] == "Cloudflare/Bot protection challenge"


def test_frozen_result_rejects_mutation(finished_result):
    with pytest.raises(RuntimeError):
        finished_result.mark_visited()
    with pytest.raises(RuntimeError):
        finished_result.add_match("http://example.com/d", 1)
    with pytest.raises(RuntimeError):
        finished_result.record_error(ErrorKind.PARSE_ERROR)


def test_sorted_matches_by_count_then_url(finished_result):
    assert finished_result.sorted_matches() == [
        ("http://example.com/c", 5),
        ("http://example.com/a", 2),
        ("http://example.com/b", 2),
    ]


def test_build_report_shape(finished_result, make_config):
    report = build_report(finished_result, make_config(depth=2, mode="fuzzy"))
    assert report["query"] == {"url": "http://example.com", "keyword": "python", "depth": 2, "mode": "fuzzy"}
    stats = report["stats"]
    assert stats["total_matches"] == 9
    assert stats["pages_visited"] == 4
    assert stats["pages_parsed"] == 3
    assert stats["pages_blocked"] == 1
    assert stats["errors"] == {
        "network_error": 1,
        "blocked": 1,
        "parse_error": 0,
        "skipped_size": 0,
        "skipped_type": 0,
    }
    assert [entry["url"] for entry in report["results"]] == [
        "http://example.com/c",
        "http://example.com/a",
        "http://example.com/b",
    ]
    assert report["blocked"] == [
        {"url": "http://example.com/private", "reason": "HTTP 403 (Access Denied/Rate Limited)"}
    ]
    # the report must be JSON-serialisable as is
    assert json.loads(dumps_json(report, pretty=False)) == report


def test_render_text(finished_result, make_config):
    text = render_text(build_report(finished_result, make_config()))
    lines = text.splitlines()
    assert lines[0] == "--- WebGrep Results ---"
    assert "Total matches found: 9" in lines
    assert "Pages visited: 4" in lines
    assert "Pages successfully parsed: 3" in lines
    assert "  NETWORK_ERROR: 1" in lines
    assert "  SKIPPED_TYPE: 0" in lines
    assert lines.index("http://example.com/c (5)") < lines.index("http://example.com/a (2)")
    assert (
        "Couldn't retrieve all links from the URL, blocked because of "
        "HTTP 403 (Access Denied/Rate Limited): http://example.com/private"
    ) in lines


def test_render_text_without_matches(make_config):
    result = CrawlResult()
    result.mark_visited()
    result.freeze()
    text = render_text(build_report(result, make_config()))
    assert "Found in:" not in text
    assert "Notice:" not in text


def test_render_json_writes_file(tmp_path, finished_result, make_config):
    report = build_report(finished_result, make_config())
    out = render_json(report, tmp_path / "out" / "report.json")
    assert out.exists()
    assert json.loads(out.read_text(encoding="utf-8")) == report


def test_render_html_writes_escaped_file(tmp_path, make_config):
    result = CrawlResult()
    result.mark_visited()
    result.add_match("http://example.com/?q=<b>", 1)
    result.freeze()
    report = build_report(result, make_config(keyword="<script>"))
    out = render_html(report, None, tmp_path / "report.html")
    html = out.read_text(encoding="utf-8")
    assert "<h1>WebGrep results</h1>" in html
    assert "&lt;script&gt;" in html
    assert "<script>" not in html
    assert "http://example.com/?q=&lt;b&gt;" in html
