# webgrep/report/text_report.py
"""Plain-text console report."""
from __future__ import annotations

from typing import Any, Dict, List


def render_text(report: Dict[str, Any]) -> str:
    """Human-readable summary of a report built by ``build_report``."""
    stats = report["stats"]
    lines: List[str] = [
        "--- WebGrep Results ---",
        f"Total matches found: {stats['total_matches']}",
        f"Pages visited: {stats['pages_visited']}",
        f"Pages successfully parsed: {stats['pages_parsed']}",
        "",
        "Detailed Stats:",
    ]
    lines.extend(f"  {kind.upper()}: {count}" for kind, count in stats["errors"].items())

    if stats["total_matches"] > 0:
        lines.extend(["", "Found in:"])
        lines.extend(f"{entry['url']} ({entry['count']})" for entry in report["results"])

    if report["blocked"]:
        lines.extend(["", "Notice: Some URLs were blocked or could not be fully processed:"])
        lines.extend(
            f"Couldn't retrieve all links from the URL, blocked because of {entry['reason']}: {entry['url']}"
            for entry in report["blocked"]
        )
    return "\n".join(lines)
