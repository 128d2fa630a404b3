# File: webgrep/report/__init__.py
"""webgrep.report: Генерация отчётов (текст, JSON и HTML), используемая CLI и тестами."""

from webgrep.report.html_report import render_html
from webgrep.report.json_report import dumps_json, render_json
from webgrep.report.text_report import render_text

__all__ = ["dumps_json", "render_html", "render_json", "render_text"]
