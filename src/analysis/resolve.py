"""Resolve a source reference to the member it names."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from utils import is_valid_identifier

if TYPE_CHECKING:
    from analysis.extract import SourceReference
    from semantic.model import SemanticModel
    from semantic.symbols import MemberSymbol, Symbol, TypeSymbol

logger = logging.getLogger(__name__)

# Preference among same-named members, first match wins.
KIND_PRIORITY = ("field", "property", "method")


def _nearest_definitions(
    declaring_type: TypeSymbol, candidates: list[Symbol]
) -> list[Symbol]:
    """Members of the nearest class defining the name; subclass members hide base ones."""
    members = [candidate for candidate in candidates if candidate.kind in KIND_PRIORITY]
    owners = [declaring_type.qualified_name]
    for member in members:
        if member.owner not in owners:
            owners.append(member.owner)
    for owner in owners:
        defined = [member for member in members if member.owner == owner]
        if defined:
            return defined
    return []


def resolve_member(reference: SourceReference, model: SemanticModel) -> MemberSymbol | None:
    """Return the member named by ``reference`` in its declaring type.

    The nearest class defining the name wins: the declaring type's own
    declarations first, then its bases depth-first. Within that class the
    first field wins, then the first property, then the first method; nested
    classes are ignored.
    """
    name = reference.member_name
    if name is None or not is_valid_identifier(name):
        return None

    declaring_type = reference.declaring_type
    candidates: list[Symbol] = []
    for index in range(len(declaring_type.declarations)):
        candidates.extend(model.lookup_members(declaring_type, name, index))
    defined = _nearest_definitions(declaring_type, candidates)

    for kind in KIND_PRIORITY:
        for candidate in defined:
            if candidate.kind == kind:
                logger.debug(
                    "resolved %s.%s to %s of %s",
                    declaring_type.qualified_name,
                    name,
                    kind,
                    candidate.owner,
                )
                return candidate  # type: ignore[return-value]
    return None

    declaring_type = reference.declaring_type
    candidates: list[Symbol] = []
    for index in range(len(declaring_type.declarations)):
        candidates.extend(model.lookup_members(declaring_type, name, index))

    for kind in KIND_PRIORITY:
        for candidate in candidates:
            if candidate.kind == kind:
                logger.debug(
                    "resolved %s.%s to %s of %s",
                    declaring_type.qualified_name,
                    name,
                    kind,
                    candidate.owner,
                )
                return candidate  # type: ignore[return-value]
    return None


__all__ = ["KIND_PRIORITY", "resolve_member"]
