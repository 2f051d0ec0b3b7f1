"""Case-source usage analysis: extraction, resolution, validation and hosting."""

from analysis.analyzer import CaseSourceAnalyzer
from analysis.context import AnalysisCancelled, CancellationToken, UsageContext
from analysis.host import AnalysisContext, AnalysisHost, build_project_index

__all__ = [
    "AnalysisCancelled",
    "AnalysisContext",
    "AnalysisHost",
    "CancellationToken",
    "CaseSourceAnalyzer",
    "UsageContext",
    "build_project_index",
]
