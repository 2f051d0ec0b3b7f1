"""Symbol records for the bound program model.

All records are frozen: a bound module is shared read-only between concurrent
usage analyses, nothing downstream of the binder may mutate it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

_WRAPPER_TYPES = frozenset(
    {"ClassVar", "Final", "Annotated", "Required", "NotRequired", "ReadOnly"}
)


@dataclass(frozen=True)
class Span:
    """1-based source span of a syntax node."""

    path: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int


def _split_top_level(text: str, separator: str) -> list[str]:
    """Split on separator while ignoring separators nested in brackets."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [part for part in parts if part]


def _head_and_args(text: str) -> tuple[str, list[str]]:
    open_index = text.find("[")
    if open_index < 0:
        return text.strip(), []
    close_index = text.rfind("]")
    if close_index < open_index:
        return text[:open_index].strip(), []
    inner = text[open_index + 1 : close_index]
    return text[:open_index].strip(), _split_top_level(inner, ",")


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1].strip()
    return text


def _expand_arm(arm: str) -> list[str]:
    arm = _unquote(arm)
    if "|" in arm:
        nested = _split_top_level(arm, "|")
        if len(nested) > 1:
            return [head for part in nested for head in _expand_arm(part)]

    head, args = _head_and_args(arm)
    last = head.rsplit(".", 1)[-1]
    if last == "Optional" and args:
        return [*_expand_arm(args[0]), "None"]
    if last == "Union":
        return [head for part in args for head in _expand_arm(part)]
    if last in _WRAPPER_TYPES:
        return _expand_arm(args[0]) if args else ["Any"]
    return [head] if head else []


def annotation_head(text: str) -> str:
    """Return the outermost name of an annotation, e.g. ``ClassVar``."""
    head, _ = _head_and_args(_unquote(text))
    return head.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class TypeRef:
    """A type as written in an annotation or inferred from a value.

    ``arms`` holds the head name of every union arm (``Optional[X]`` expands
    to ``X`` and ``None``). An empty ``arms`` means the type is unknown.
    """

    display: str
    arms: tuple[str, ...] = ()

    @property
    def is_unknown(self) -> bool:
        return not self.arms

    @classmethod
    def unknown(cls) -> TypeRef:
        return cls(display="<unknown>")

    @classmethod
    def named(cls, name: str) -> TypeRef:
        return cls(display=name, arms=(name,))

    @classmethod
    def from_annotation(cls, text: str) -> TypeRef:
        """Build a TypeRef from annotation source text.

        >>> TypeRef.from_annotation("Optional[list[int]]").arms
        ('list', 'None')
        >>> TypeRef.from_annotation("ClassVar[tuple[int, ...]]").arms
        ('tuple',)
        """
        display = _unquote(text)
        arms: list[str] = []
        for arm in _split_top_level(display, "|"):
            arms.extend(_expand_arm(arm))
        return cls(display=display, arms=tuple(arms))


@dataclass(frozen=True)
class FieldSymbol:
    name: str
    owner: str
    span: Span
    is_static: bool
    type: TypeRef
    has_default: bool = True
    kind: Literal["field"] = field(default="field", init=False)


@dataclass(frozen=True)
class PropertySymbol:
    name: str
    owner: str
    span: Span
    type: TypeRef
    is_static: bool = False
    kind: Literal["property"] = field(default="property", init=False)


@dataclass(frozen=True)
class MethodSymbol:
    """A function bound in a class body, or at module level.

    ``parameter_count`` excludes the bound receiver and variadic parameters.
    """

    name: str
    owner: str
    span: Span
    is_static: bool
    return_type: TypeRef
    parameter_count: int
    required_parameter_count: int
    kind: Literal["method"] = field(default="method", init=False)


@dataclass(frozen=True)
class Declaration:
    """One syntactic declaration of a type (a class statement or a module)."""

    span: Span
    members: tuple[Symbol, ...] = ()
    bases: tuple[str, ...] = ()
    is_dataclass: bool = False


@dataclass(frozen=True)
class TypeSymbol:
    """A class, or a module acting as the namespace of module-level tests.

    A class statement repeated under the same qualified name in one module
    contributes one ``Declaration`` per statement, in source order.
    """

    name: str
    qualified_name: str
    module: str
    kind: Literal["class", "module"]
    declarations: tuple[Declaration, ...]

    @property
    def span(self) -> Span:
        return self.declarations[0].span

    @property
    def members(self) -> tuple[Symbol, ...]:
        return tuple(
            member for declaration in self.declarations for member in declaration.members
        )

    @property
    def bases(self) -> tuple[str, ...]:
        seen: list[str] = []
        for declaration in self.declarations:
            for base in declaration.bases:
                if base not in seen:
                    seen.append(base)
        return tuple(seen)

    @property
    def is_dataclass(self) -> bool:
        return any(declaration.is_dataclass for declaration in self.declarations)

    @property
    def is_static(self) -> bool:
        return True

    @property
    def owner(self) -> str:
        return self.qualified_name.rsplit(".", 1)[0]


MemberSymbol = Union[FieldSymbol, PropertySymbol, MethodSymbol]
Symbol = Union[FieldSymbol, PropertySymbol, MethodSymbol, TypeSymbol]


__all__ = [
    "Declaration",
    "FieldSymbol",
    "MemberSymbol",
    "MethodSymbol",
    "PropertySymbol",
    "Span",
    "Symbol",
    "TypeRef",
    "TypeSymbol",
    "annotation_head",
]
