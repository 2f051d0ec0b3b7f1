from __future__ import annotations

import json
from typing import TYPE_CHECKING

from contract.models import DiagnosticRecord, SourceSpan
from report.write import (
    DIAGNOSTICS_FILENAME,
    SUMMARY_FILENAME,
    build_summary,
    format_jsonl,
    format_text,
    load_diagnostics,
    write_reports,
)

if TYPE_CHECKING:
    from pathlib import Path


def _record(
    diagnostic_id: str,
    severity: str,
    line: int,
    properties: dict[str, str] | None = None,
) -> DiagnosticRecord:
    return DiagnosticRecord(
        id=diagnostic_id,
        severity=severity,
        category="Structure",
        title="title",
        message=f"message for {diagnostic_id}",
        span=SourceSpan(
            path="tests/test_x.py", start_line=line, start_col=5, end_line=line, end_col=12
        ),
        properties=properties or {},
    )


def test_format_text_uses_location_severity_and_id() -> None:
    record = _record("CSRC002", "error", 3)

    assert format_text(record) == "tests/test_x.py:3:5: error[CSRC002] message for CSRC002"


def test_build_summary_counts_by_id_and_severity() -> None:
    records = [
        _record("CSRC002", "error", 1),
        _record("CSRC001", "warning", 2),
        _record("CSRC002", "error", 3),
    ]

    summary = build_summary(records, files_scanned=4, usages_analyzed=5)

    assert summary.total == 3
    assert summary.by_id == {"CSRC001": 1, "CSRC002": 2}
    assert list(summary.by_severity) == ["error", "warning"]
    assert summary.has_errors
    assert not build_summary([_record("CSRC001", "warning", 1)]).has_errors


def test_format_jsonl_writes_one_sorted_object_per_line() -> None:
    payload = format_jsonl([_record("CSRC001", "warning", 1, {"name_of_target": "Cases"})])

    lines = payload.decode("utf-8").splitlines()
    assert len(lines) == 1
    parsed = json.loads(lines[0])
    assert list(parsed) == sorted(parsed)
    assert parsed["properties"] == {"name_of_target": "Cases"}
    assert format_jsonl([]) == b""


def test_write_reports_round_trips_records(tmp_path: Path) -> None:
    records = [
        _record("CSRC001", "warning", 1, {"name_of_target": "Cases"}),
        _record("CSRC007", "error", 9),
    ]
    out_dir = tmp_path / "nested" / "reports"

    written = write_reports(out_dir, records, build_summary(records, files_scanned=1))

    assert written == [out_dir / DIAGNOSTICS_FILENAME, out_dir / SUMMARY_FILENAME]
    assert load_diagnostics(out_dir / DIAGNOSTICS_FILENAME) == records
    summary = json.loads((out_dir / SUMMARY_FILENAME).read_text(encoding="utf-8"))
    assert summary["total"] == 2
    assert summary["files_scanned"] == 1
    assert summary["by_id"] == {"CSRC001": 1, "CSRC007": 1}
