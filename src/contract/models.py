"""Diagnostic record models.

Records are what the host collects and what the reporters serialize, one
per line in ``diagnostics.jsonl``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# Schema version for diagnostics.jsonl records.
SCHEMA_VERSION = 1

Severity = Literal["error", "warning", "info"]

SEVERITY_RANK: dict[str, int] = {"error": 0, "warning": 1, "info": 2}


class SourceSpan(BaseModel):
    """1-based source span a diagnostic is anchored to."""

    path: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int


class DiagnosticRecord(BaseModel):
    """A single reported finding."""

    schema_version: int = Field(default=SCHEMA_VERSION)
    id: str
    severity: Severity
    category: str
    title: str
    message: str
    span: SourceSpan
    properties: dict[str, str] = Field(
        default_factory=dict,
        description="Machine-readable side-channel data for fix-up tooling",
    )

    def location(self) -> str:
        return f"{self.span.path}:{self.span.start_line}:{self.span.start_col}"

    def sort_key(self) -> tuple[str, int, int, str, str]:
        return (
            self.span.path,
            self.span.start_line,
            self.span.start_col,
            self.id,
            self.message,
        )


__all__ = [
    "SCHEMA_VERSION",
    "SEVERITY_RANK",
    "DiagnosticRecord",
    "Severity",
    "SourceSpan",
]
