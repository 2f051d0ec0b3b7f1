"""Diagnostic output writers."""

from report.write import (
    ReportSummary,
    build_summary,
    format_jsonl,
    format_text,
    load_diagnostics,
    write_reports,
)

__all__ = [
    "ReportSummary",
    "build_summary",
    "format_jsonl",
    "format_text",
    "load_diagnostics",
    "write_reports",
]
