"""Stable surface shared by the analyzer, hosts and reporters.

Descriptor identifiers and the diagnostic record schema are the boundary
other tooling depends on. Treat these exports as authoritative.
"""

from contract.descriptors import (
    DESCRIPTORS_BY_ID,
    PROPERTY_KEY_NAME_OF_TARGET,
    SUPPORTED_DESCRIPTORS,
    DiagnosticDescriptor,
)
from contract.models import SCHEMA_VERSION, DiagnosticRecord, Severity, SourceSpan

__all__ = [
    "DESCRIPTORS_BY_ID",
    "PROPERTY_KEY_NAME_OF_TARGET",
    "SCHEMA_VERSION",
    "SUPPORTED_DESCRIPTORS",
    "DiagnosticDescriptor",
    "DiagnosticRecord",
    "Severity",
    "SourceSpan",
]
