"""Diagnostic descriptors advertised by the case-source analyzer.

Identifiers are a stable contract: configuration files and suppression
tooling key on them, so an id is never reused for a different check.
"""

from __future__ import annotations

from dataclasses import dataclass

from contract.models import Severity

CATEGORY_STRUCTURE = "Structure"

# Side-channel property attached to CONSIDER_SYMBOLIC_NAME diagnostics.
PROPERTY_KEY_NAME_OF_TARGET = "name_of_target"

CONSIDER_SYMBOLIC_NAME_ID = "CSRC001"
MISSING_SOURCE_ID = "CSRC002"
SOURCE_TYPE_NOT_ENUMERABLE_ID = "CSRC003"
SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR_ID = "CSRC004"
SOURCE_NOT_STATIC_ID = "CSRC005"
PARAMETER_COUNT_MISMATCH_ID = "CSRC006"
SOURCE_NOT_ENUMERABLE_ID = "CSRC007"
PARAMETERS_SUPPLIED_TO_NON_METHOD_ID = "CSRC008"


@dataclass(frozen=True)
class DiagnosticDescriptor:
    """Static metadata for one kind of diagnostic."""

    id: str
    title: str
    message_format: str
    category: str
    default_severity: Severity
    description: str

    def format_message(self, *args: object) -> str:
        return self.message_format.format(*args)


CONSIDER_SYMBOLIC_NAME = DiagnosticDescriptor(
    id=CONSIDER_SYMBOLIC_NAME_ID,
    title="The case source should use nameof() to specify its target.",
    message_format='Consider using nameof({0}) instead of "{1}".',
    category=CATEGORY_STRUCTURE,
    default_severity="warning",
    description=(
        "A string literal naming the source is not checked when the member is "
        "renamed. nameof() keeps the reference tied to the declaration."
    ),
)

MISSING_SOURCE = DiagnosticDescriptor(
    id=MISSING_SOURCE_ID,
    title="The case source argument does not specify an existing member.",
    message_format="The case source argument '{0}' does not specify an existing member.",
    category=CATEGORY_STRUCTURE,
    default_severity="error",
    description=(
        "The case source argument does not specify an existing member. "
        "This will lead to an error at run time."
    ),
)

SOURCE_TYPE_NOT_ENUMERABLE = DiagnosticDescriptor(
    id=SOURCE_TYPE_NOT_ENUMERABLE_ID,
    title="The source type is not iterable.",
    message_format="The source type '{0}' does not implement __iter__.",
    category=CATEGORY_STRUCTURE,
    default_severity="error",
    description=(
        "A source type used on its own is instantiated and iterated by the "
        "runner, so it must implement __iter__."
    ),
)

SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR = DiagnosticDescriptor(
    id=SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR_ID,
    title="The source type cannot be constructed without arguments.",
    message_format="The source type '{0}' cannot be constructed without arguments.",
    category=CATEGORY_STRUCTURE,
    default_severity="error",
    description=(
        "A source type used on its own is instantiated by the runner with no "
        "arguments, so its constructor must not require any."
    ),
)

SOURCE_NOT_STATIC = DiagnosticDescriptor(
    id=SOURCE_NOT_STATIC_ID,
    title="The specified source is not static.",
    message_format="The specified source '{0}' is not static.",
    category=CATEGORY_STRUCTURE,
    default_severity="error",
    description=(
        "The runner reads the source from the class, not from an instance, so "
        "the source must be a class attribute, a staticmethod or a classmethod."
    ),
)

PARAMETER_COUNT_MISMATCH = DiagnosticDescriptor(
    id=PARAMETER_COUNT_MISMATCH_ID,
    title=(
        "The number of parameters provided by the case source does not match "
        "the number of parameters of the source method."
    ),
    message_format=(
        "The case source provides '{0}' parameter(s), but the source method "
        "expects '{1}' parameter(s)."
    ),
    category=CATEGORY_STRUCTURE,
    default_severity="error",
    description=(
        "The method_params supplied to the case source must match the "
        "parameters of the source method."
    ),
)

SOURCE_NOT_ENUMERABLE = DiagnosticDescriptor(
    id=SOURCE_NOT_ENUMERABLE_ID,
    title="The case source does not return an iterable.",
    message_format=(
        "The case source does not return an iterable. Instead it returns a '{0}'."
    ),
    category=CATEGORY_STRUCTURE,
    default_severity="error",
    description="The field, property or method used as a source must produce an iterable.",
)

PARAMETERS_SUPPLIED_TO_NON_METHOD = DiagnosticDescriptor(
    id=PARAMETERS_SUPPLIED_TO_NON_METHOD_ID,
    title=(
        "The case source provides parameters to a source - field or property - "
        "that expects no parameters."
    ),
    message_format=(
        "The case source provides '{0}' parameter(s), but {1} cannot take parameters."
    ),
    category=CATEGORY_STRUCTURE,
    default_severity="error",
    description="Only a method source can receive method_params.",
)

SUPPORTED_DESCRIPTORS: tuple[DiagnosticDescriptor, ...] = (
    CONSIDER_SYMBOLIC_NAME,
    MISSING_SOURCE,
    SOURCE_TYPE_NOT_ENUMERABLE,
    SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR,
    SOURCE_NOT_STATIC,
    PARAMETER_COUNT_MISMATCH,
    SOURCE_NOT_ENUMERABLE,
    PARAMETERS_SUPPLIED_TO_NON_METHOD,
)

DESCRIPTORS_BY_ID: dict[str, DiagnosticDescriptor] = {
    descriptor.id: descriptor for descriptor in SUPPORTED_DESCRIPTORS
}


__all__ = [
    "CATEGORY_STRUCTURE",
    "CONSIDER_SYMBOLIC_NAME",
    "DESCRIPTORS_BY_ID",
    "DiagnosticDescriptor",
    "MISSING_SOURCE",
    "PARAMETERS_SUPPLIED_TO_NON_METHOD",
    "PARAMETER_COUNT_MISMATCH",
    "PROPERTY_KEY_NAME_OF_TARGET",
    "SOURCE_NOT_ENUMERABLE",
    "SOURCE_NOT_STATIC",
    "SOURCE_TYPE_NOT_ENUMERABLE",
    "SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR",
    "SUPPORTED_DESCRIPTORS",
]
