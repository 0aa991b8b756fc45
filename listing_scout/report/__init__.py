"""listing_scout.report: JSON и HTML отчёты о запуске, используемые CLI."""

from __future__ import annotations

from listing_scout.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from listing_scout.report.json_report import render_json

__all__ = ["render_json", "render_html", "DEFAULT_TEMPLATE_DIR"]
