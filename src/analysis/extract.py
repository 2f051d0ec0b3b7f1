"""Normalize a decorator usage's arguments into a ``SourceReference``.

Accepted call shapes (positional and keyword forms may be mixed):

    case_source(SourceType)
    case_source(SourceType, source_name)
    case_source(SourceType, source_name, method_params)
    case_source(source_name)
    case_source(source_name, method_params)

Anything else (no arguments, unpacked arguments, unknown or repeated
keywords, a name that is not a compile-time ``str``) is not applicable and
yields ``None``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from parse.treesitter_tree import is_string_literal, named_children, unwrap_parentheses

if TYPE_CHECKING:
    from tree_sitter import Node

    from parse.binder import DecoratorUsage
    from semantic.model import SemanticModel
    from semantic.symbols import TypeSymbol

logger = logging.getLogger(__name__)

SOURCE_TYPE = "source_type"
SOURCE_NAME = "source_name"
METHOD_PARAMS = "method_params"

_SLOTS = (SOURCE_TYPE, SOURCE_NAME, METHOD_PARAMS)
_INLINE_SEQUENCE_TYPES = frozenset({"list", "tuple"})
_UNPACKING_TYPES = frozenset({"list_splat", "parenthesized_list_splat", "dictionary_splat"})


@dataclass(frozen=True)
class SourceReference:
    """Canonical form of one case-source usage.

    ``member_name`` and ``name_node`` are both set or both ``None`` (the
    type-only form).
    """

    declaring_type: TypeSymbol
    member_name: str | None = None
    name_node: Node | None = None
    is_name_literal: bool = False
    supplied_parameter_count: int | None = None
    type_node: Node | None = None
    argument_count: int = 0


def _assign_slots(
    usage: DecoratorUsage, model: SemanticModel
) -> tuple[dict[str, Node], TypeSymbol | None] | None:
    """Map arguments onto logical slots, resolving a leading class reference."""
    slots: dict[str, Node] = {}
    declaring_type: TypeSymbol | None = None

    positional = [argument for argument in usage.arguments if argument.keyword is None]
    keywords = [argument for argument in usage.arguments if argument.keyword is not None]

    slot_order = list(_SLOTS)
    if positional:
        declaring_type = model.resolve_type(positional[0].node, usage.enclosing_type)
        if declaring_type is None:
            slot_order = slot_order[1:]

    if len(positional) > len(slot_order):
        return None
    for slot, argument in zip(slot_order, positional):
        slots[slot] = argument.node

    for argument in keywords:
        if argument.keyword not in _SLOTS or argument.keyword in slots:
            return None
        slots[argument.keyword] = argument.node

    if SOURCE_TYPE in slots and declaring_type is None:
        declaring_type = model.resolve_type(slots[SOURCE_TYPE], usage.enclosing_type)
        if declaring_type is None:
            return None

    return slots, declaring_type


def _inline_parameter_count(node: Node) -> int | None:
    node = unwrap_parentheses(node)
    if node.type not in _INLINE_SEQUENCE_TYPES:
        return None
    elements = named_children(node)
    if any(element.type in _UNPACKING_TYPES for element in elements):
        return None
    return len(elements)


def extract_source_reference(
    usage: DecoratorUsage, model: SemanticModel
) -> SourceReference | None:
    """Build the ``SourceReference`` for a usage, or None when not applicable."""
    if not usage.arguments:
        return None
    if any(argument.is_unpacked for argument in usage.arguments):
        return None

    assigned = _assign_slots(usage, model)
    if assigned is None:
        return None
    slots, declaring_type = assigned

    member_name: str | None = None
    name_node = slots.get(SOURCE_NAME)
    is_literal = False
    if name_node is not None:
        value = model.constant_value(name_node, usage.enclosing_type)
        if not isinstance(value, str):
            logger.debug(
                "%s: source name is not a constant string", usage.span.path
            )
            return None
        member_name = value
        is_literal = is_string_literal(name_node)

    params_node = slots.get(METHOD_PARAMS)
    supplied = _inline_parameter_count(params_node) if params_node is not None else None

    return SourceReference(
        declaring_type=declaring_type or usage.enclosing_type,
        member_name=member_name,
        name_node=name_node,
        is_name_literal=is_literal,
        supplied_parameter_count=supplied,
        type_node=slots.get(SOURCE_TYPE),
        argument_count=len(usage.arguments),
    )


__all__ = ["SourceReference", "extract_source_reference"]
