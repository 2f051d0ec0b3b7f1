"""The case-source analyzer: extract, resolve, validate, emit."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from analysis.emit import emit_findings
from analysis.extract import extract_source_reference
from analysis.resolve import resolve_member
from analysis.validate import validate_member_source, validate_type_source
from contract.descriptors import SUPPORTED_DESCRIPTORS

if TYPE_CHECKING:
    from analysis.context import UsageContext
    from analysis.host import AnalysisContext
    from contract.descriptors import DiagnosticDescriptor

logger = logging.getLogger(__name__)


class CaseSourceAnalyzer:
    """Validates references made by test-case-source decorators.

    Stateless between usages, so one instance may serve concurrent
    invocations.
    """

    supported_descriptors: tuple[DiagnosticDescriptor, ...] = SUPPORTED_DESCRIPTORS

    def initialize(self, context: AnalysisContext) -> None:
        context.enable_concurrent_execution()
        context.register_usage_action(self.analyze_usage)

    def analyze_usage(self, context: UsageContext) -> None:
        context.cancellation_token.raise_if_cancelled()

        usage = context.usage
        model = context.semantic_model
        reference = extract_source_reference(usage, model)
        if reference is None:
            logger.debug(
                "%s:%d: %s usage not applicable, skipped",
                usage.span.path,
                usage.span.start_line,
                usage.callee,
            )
            return

        findings = validate_type_source(reference, model)
        if reference.member_name is not None:
            member = resolve_member(reference, model)
            findings.extend(
                validate_member_source(reference, member, usage.enclosing_type, model)
            )
        emit_findings(findings, context)


__all__ = ["CaseSourceAnalyzer"]
