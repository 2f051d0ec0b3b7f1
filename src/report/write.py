"""Serialize diagnostics as text lines, JSONL records and a summary."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

import orjson
from pydantic import BaseModel, Field

from contract.models import SCHEMA_VERSION, SEVERITY_RANK, DiagnosticRecord

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

DIAGNOSTICS_FILENAME = "diagnostics.jsonl"
SUMMARY_FILENAME = "summary.json"


class ReportSummary(BaseModel):
    """Counts for one check run, written to summary.json."""

    schema_version: int = Field(default=SCHEMA_VERSION)
    files_scanned: int = 0
    usages_analyzed: int = 0
    total: int = 0
    by_id: dict[str, int] = Field(default_factory=dict)
    by_severity: dict[str, int] = Field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return self.by_severity.get("error", 0) > 0


def build_summary(
    records: Sequence[DiagnosticRecord],
    files_scanned: int = 0,
    usages_analyzed: int = 0,
) -> ReportSummary:
    by_id = Counter(record.id for record in records)
    by_severity = Counter(record.severity for record in records)
    return ReportSummary(
        files_scanned=files_scanned,
        usages_analyzed=usages_analyzed,
        total=len(records),
        by_id=dict(sorted(by_id.items())),
        by_severity={
            severity: by_severity[severity]
            for severity in sorted(by_severity, key=lambda s: SEVERITY_RANK[s])
        },
    )


def format_text(record: DiagnosticRecord) -> str:
    return f"{record.location()}: {record.severity}[{record.id}] {record.message}"


def format_jsonl(records: Sequence[DiagnosticRecord]) -> bytes:
    return b"".join(
        orjson.dumps(record.model_dump(), option=orjson.OPT_SORT_KEYS) + b"\n"
        for record in records
    )


def _write_jsonl(path: Path, records: Sequence[DiagnosticRecord]) -> None:
    with path.open("wb") as f:
        f.write(format_jsonl(records))


def _write_json(path: Path, obj: BaseModel) -> None:
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    path.write_bytes(orjson.dumps(obj.model_dump(), option=opts))


def write_reports(
    out_dir: Path,
    records: Sequence[DiagnosticRecord],
    summary: ReportSummary,
) -> list[Path]:
    """Write diagnostics.jsonl and summary.json into ``out_dir``.

    Returns:
        The written paths, in a fixed order.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    diagnostics_path = out_dir / DIAGNOSTICS_FILENAME
    summary_path = out_dir / SUMMARY_FILENAME
    _write_jsonl(diagnostics_path, records)
    _write_json(summary_path, summary)
    return [diagnostics_path, summary_path]


def load_diagnostics(path: Path) -> list[DiagnosticRecord]:
    """Load records from a diagnostics.jsonl file."""
    records: list[DiagnosticRecord] = []
    with path.open("rb") as handle:
        for line in handle:
            line = line.strip()
            if line:
                records.append(DiagnosticRecord.model_validate(orjson.loads(line)))
    return records


__all__ = [
    "DIAGNOSTICS_FILENAME",
    "SUMMARY_FILENAME",
    "ReportSummary",
    "build_summary",
    "format_jsonl",
    "format_text",
    "load_diagnostics",
    "write_reports",
]
