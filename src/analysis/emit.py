"""Map validation findings to diagnostic descriptors and report them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from analysis.validate import Outcome
from contract.descriptors import (
    CONSIDER_SYMBOLIC_NAME,
    MISSING_SOURCE,
    PARAMETER_COUNT_MISMATCH,
    PARAMETERS_SUPPLIED_TO_NON_METHOD,
    SOURCE_NOT_ENUMERABLE,
    SOURCE_NOT_STATIC,
    SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR,
    SOURCE_TYPE_NOT_ENUMERABLE,
    DiagnosticDescriptor,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from analysis.context import UsageContext
    from analysis.validate import Finding

DESCRIPTOR_BY_OUTCOME: dict[Outcome, DiagnosticDescriptor] = {
    Outcome.MISSING_SOURCE: MISSING_SOURCE,
    Outcome.SOURCE_TYPE_NOT_ENUMERABLE: SOURCE_TYPE_NOT_ENUMERABLE,
    Outcome.SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR: SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR,
    Outcome.SOURCE_NOT_STATIC: SOURCE_NOT_STATIC,
    Outcome.PARAMETER_COUNT_MISMATCH: PARAMETER_COUNT_MISMATCH,
    Outcome.SOURCE_NOT_ENUMERABLE: SOURCE_NOT_ENUMERABLE,
    Outcome.PARAMETERS_SUPPLIED_TO_NON_METHOD: PARAMETERS_SUPPLIED_TO_NON_METHOD,
    Outcome.CONSIDER_SYMBOLIC_NAME: CONSIDER_SYMBOLIC_NAME,
}


def emit_findings(findings: Iterable[Finding], context: UsageContext) -> None:
    for finding in findings:
        descriptor = DESCRIPTOR_BY_OUTCOME.get(finding.outcome)
        if descriptor is None:
            continue
        context.report_diagnostic(
            descriptor,
            finding.anchor,
            *finding.arguments,
            properties=finding.properties or None,
        )


__all__ = ["DESCRIPTOR_BY_OUTCOME", "emit_findings"]
