"""Structural capability predicates over bound types.

Both predicates answer with a tri-state: ``True``/``False`` when the answer
follows from the bound program, ``None`` when it depends on code outside the
project (an unresolvable base class, an ``Any`` annotation, a missing
annotation). Callers report only on a definite ``False``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from semantic.symbols import FieldSymbol, MethodSymbol, TypeRef, TypeSymbol

if TYPE_CHECKING:
    from semantic.model import SemanticModel

ITERABLE_TYPE_NAMES = frozenset(
    {
        # builtins
        "list",
        "tuple",
        "set",
        "frozenset",
        "dict",
        "str",
        "bytes",
        "bytearray",
        "memoryview",
        "range",
        "map",
        "filter",
        "zip",
        "enumerate",
        "reversed",
        # collections
        "deque",
        "defaultdict",
        "OrderedDict",
        "Counter",
        "ChainMap",
        # typing / collections.abc
        "Iterable",
        "Iterator",
        "Generator",
        "Collection",
        "Container",
        "Reversible",
        "Sequence",
        "MutableSequence",
        "AbstractSet",
        "MutableSet",
        "Mapping",
        "MutableMapping",
        "KeysView",
        "ValuesView",
        "ItemsView",
        "List",
        "Tuple",
        "Set",
        "FrozenSet",
        "Dict",
        "DefaultDict",
        "Deque",
        "NamedTuple",
    }
)

NON_ITERABLE_TYPE_NAMES = frozenset(
    {
        "int",
        "float",
        "complex",
        "bool",
        "None",
        "NoneType",
        "object",
        "type",
        "Type",
        "Callable",
        "function",
        "Decimal",
        "Fraction",
        "Path",
        # asynchronous producers cannot be consumed by a synchronous runner
        "AsyncIterable",
        "AsyncIterator",
        "AsyncGenerator",
        "Coroutine",
        "Awaitable",
    }
)

# Bases that contribute nothing to iteration of instances.
NEUTRAL_BASE_NAMES = frozenset(
    {
        "object",
        "Generic",
        "Protocol",
        "ABC",
        "Enum",
        "IntEnum",
        "StrEnum",
        "Flag",
        "IntFlag",
    }
)

UNKNOWN_TYPE_NAMES = frozenset({"Any", "TypeVar"})

_ITERATION_METHOD = "__iter__"
_INIT_METHOD = "__init__"


def _own_method(type_symbol: TypeSymbol, name: str) -> MethodSymbol | None:
    for member in type_symbol.members:
        if isinstance(member, MethodSymbol) and member.name == name:
            return member
    return None


def _short_name(head: str) -> str:
    return head.rsplit(".", 1)[-1]


def type_is_enumerable(
    type_symbol: TypeSymbol,
    model: SemanticModel,
    _seen: frozenset[str] = frozenset(),
) -> bool | None:
    """Return whether instances of ``type_symbol`` can be iterated.

    A class is enumerable when it, or one of its bases, defines ``__iter__``,
    or when it derives from a known iterable type.
    """
    if type_symbol.qualified_name in _seen:
        return False
    seen = _seen | {type_symbol.qualified_name}

    if _own_method(type_symbol, _ITERATION_METHOD) is not None:
        return True
    if any(member.name == _ITERATION_METHOD for member in type_symbol.members):
        # bound to a value rather than defined with def
        return None

    undecided = False
    for base in type_symbol.bases:
        base_type = model.resolve_type_name(base, type_symbol)
        if base_type is not None:
            result = type_is_enumerable(base_type, model, seen)
        else:
            result = _builtin_head_is_enumerable(TypeRef.from_annotation(base))
        if result is True:
            return True
        if result is None:
            undecided = True

    return None if undecided else False


def _builtin_head_is_enumerable(type_ref: TypeRef) -> bool | None:
    if type_ref.is_unknown:
        return None
    short = _short_name(type_ref.arms[0])
    if short in ITERABLE_TYPE_NAMES:
        return True
    if short in NON_ITERABLE_TYPE_NAMES or short in NEUTRAL_BASE_NAMES:
        return False
    return None


def _arm_is_enumerable(arm: str, model: SemanticModel, scope: TypeSymbol) -> bool | None:
    short = _short_name(arm)
    if short in UNKNOWN_TYPE_NAMES:
        return None

    resolved = model.resolve_type_name(arm, scope)
    if resolved is not None:
        return type_is_enumerable(resolved, model)

    if short in ITERABLE_TYPE_NAMES:
        return True
    if short in NON_ITERABLE_TYPE_NAMES:
        return False
    return None


def is_enumerable(
    type_ref: TypeRef,
    model: SemanticModel,
    scope: TypeSymbol,
) -> bool | None:
    """Return whether a value of ``type_ref`` can be iterated.

    ``None`` arms of an optional are skipped. Any definitely non-iterable arm
    makes the whole union non-iterable.
    """
    if type_ref.is_unknown:
        return None

    arms = [arm for arm in type_ref.arms if arm != "None"]
    if not arms:
        return False

    undecided = False
    for arm in arms:
        result = _arm_is_enumerable(arm, model, scope)
        if result is False:
            return False
        if result is None:
            undecided = True
    return None if undecided else True


def _dataclass_fields(
    type_symbol: TypeSymbol, model: SemanticModel, seen: set[str]
) -> dict[str, FieldSymbol]:
    """Generated ``__init__`` fields in definition order, base dataclasses first."""
    seen.add(type_symbol.qualified_name)
    fields: dict[str, FieldSymbol] = {}
    for base in reversed(type_symbol.bases):
        base_type = model.resolve_type_name(base, type_symbol)
        if base_type is None or base_type.qualified_name in seen:
            continue
        fields.update(_dataclass_fields(base_type, model, seen))

    if type_symbol.is_dataclass:
        for member in type_symbol.members:
            if isinstance(member, FieldSymbol) and not member.is_static:
                fields.pop(member.name, None)
                fields[member.name] = member
    return fields


def _requires_arguments(
    type_symbol: TypeSymbol, model: SemanticModel, seen: set[str]
) -> bool | None:
    """Judge the nearest ``__init__``, explicit or dataclass-generated.

    ``None`` when no class the project can see defines one.
    """
    seen.add(type_symbol.qualified_name)
    init = _own_method(type_symbol, _INIT_METHOD)
    if init is not None:
        return init.required_parameter_count > 0

    if type_symbol.is_dataclass:
        fields = _dataclass_fields(type_symbol, model, set())
        return any(not member.has_default for member in fields.values())

    for base in type_symbol.bases:
        base_type = model.resolve_type_name(base, type_symbol)
        if base_type is None or base_type.qualified_name in seen:
            continue
        result = _requires_arguments(base_type, model, seen)
        if result is not None:
            return result
    return None


def has_default_constructor(type_symbol: TypeSymbol, model: SemanticModel) -> bool:
    """Return whether ``type_symbol()`` can be called without arguments.

    Unresolvable bases are assumed to be constructible without arguments.
    """
    return not _requires_arguments(type_symbol, model, set())


__all__ = [
    "ITERABLE_TYPE_NAMES",
    "NON_ITERABLE_TYPE_NAMES",
    "has_default_constructor",
    "is_enumerable",
    "type_is_enumerable",
]
