"""Independent checks over a source reference and its resolved member.

Each check appends to the result list; only a missing member stops the
member-level checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from contract.descriptors import PROPERTY_KEY_NAME_OF_TARGET
from semantic.capabilities import has_default_constructor, is_enumerable, type_is_enumerable
from semantic.symbols import FieldSymbol, MethodSymbol, PropertySymbol

if TYPE_CHECKING:
    from tree_sitter import Node

    from analysis.extract import SourceReference
    from semantic.model import SemanticModel
    from semantic.symbols import MemberSymbol, TypeRef, TypeSymbol


class Outcome(Enum):
    MISSING_SOURCE = "MissingSource"
    SOURCE_TYPE_NOT_ENUMERABLE = "SourceTypeNotEnumerable"
    SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR = "SourceTypeNoDefaultConstructor"
    SOURCE_NOT_STATIC = "SourceNotStatic"
    PARAMETER_COUNT_MISMATCH = "ParameterCountMismatch"
    SOURCE_NOT_ENUMERABLE = "SourceNotEnumerable"
    PARAMETERS_SUPPLIED_TO_NON_METHOD = "ParametersSuppliedToNonMethod"
    CONSIDER_SYMBOLIC_NAME = "ConsiderUsingSymbolicName"
    VALID = "Valid"


@dataclass(frozen=True)
class Finding:
    outcome: Outcome
    anchor: Node
    arguments: tuple[object, ...] = ()
    properties: dict[str, str] = field(default_factory=dict)


def validate_type_source(reference: SourceReference, model: SemanticModel) -> list[Finding]:
    """Checks for the type-only form ``case_source(SourceType)``."""
    if reference.member_name is not None or reference.type_node is None:
        return []
    if reference.argument_count != 1:
        return []

    source_type = reference.declaring_type
    anchor = reference.type_node
    if type_is_enumerable(source_type, model) is False:
        return [Finding(Outcome.SOURCE_TYPE_NOT_ENUMERABLE, anchor, (source_type.name,))]
    if not has_default_constructor(source_type, model):
        return [
            Finding(Outcome.SOURCE_TYPE_NO_DEFAULT_CONSTRUCTOR, anchor, (source_type.name,))
        ]
    return []


def suggested_name(
    reference: SourceReference,
    member: MemberSymbol,
    enclosing_type: TypeSymbol,
    model: SemanticModel,
) -> str:
    declaring_type = reference.declaring_type
    if declaring_type.qualified_name == enclosing_type.qualified_name:
        return member.name
    type_name = model.minimal_display_name(declaring_type, enclosing_type)
    return f"{type_name}.{member.name}"


def _member_type(member: MemberSymbol) -> TypeRef:
    if isinstance(member, MethodSymbol):
        return member.return_type
    return member.type


def _member_scope(
    member: MemberSymbol, reference: SourceReference, model: SemanticModel
) -> TypeSymbol:
    """Type whose module the member's annotation was written in."""
    return model.find_type(member.owner) or reference.declaring_type


def validate_member_source(
    reference: SourceReference,
    member: MemberSymbol | None,
    enclosing_type: TypeSymbol,
    model: SemanticModel,
) -> list[Finding]:
    """Checks for the named-member forms. All findings anchor at the name."""
    anchor = reference.name_node
    if reference.member_name is None or anchor is None:
        return []

    if member is None:
        return [Finding(Outcome.MISSING_SOURCE, anchor, (reference.member_name,))]

    findings: list[Finding] = []
    if reference.is_name_literal and model.is_accessible(member, enclosing_type):
        suggestion = suggested_name(reference, member, enclosing_type, model)
        findings.append(
            Finding(
                Outcome.CONSIDER_SYMBOLIC_NAME,
                anchor,
                (suggestion, reference.member_name),
                {PROPERTY_KEY_NAME_OF_TARGET: suggestion},
            )
        )

    if not member.is_static:
        findings.append(Finding(Outcome.SOURCE_NOT_STATIC, anchor, (member.name,)))

    member_type = _member_type(member)
    if is_enumerable(member_type, model, _member_scope(member, reference, model)) is False:
        findings.append(Finding(Outcome.SOURCE_NOT_ENUMERABLE, anchor, (member_type.display,)))

    supplied = reference.supplied_parameter_count or 0
    if isinstance(member, (FieldSymbol, PropertySymbol)):
        if supplied > 0:
            kind_text = "fields" if isinstance(member, FieldSymbol) else "properties"
            findings.append(
                Finding(Outcome.PARAMETERS_SUPPLIED_TO_NON_METHOD, anchor, (supplied, kind_text))
            )
    elif supplied != member.parameter_count:
        findings.append(
            Finding(
                Outcome.PARAMETER_COUNT_MISMATCH,
                anchor,
                (supplied, member.parameter_count),
            )
        )

    return findings


__all__ = [
    "Finding",
    "Outcome",
    "suggested_name",
    "validate_member_source",
    "validate_type_source",
]
