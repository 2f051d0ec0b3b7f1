"""Semantic model capability surface consumed by the analyzer.

The analyzer never reaches into the binder or the project index directly. It
only asks these questions, so any host able to answer them (the tree-sitter
project index, or a hand-built table in tests) can drive it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from tree_sitter import Node

    from semantic.symbols import Symbol, TypeSymbol


class SemanticModel(Protocol):
    def resolve_type(self, node: Node, scope: TypeSymbol) -> TypeSymbol | None:
        """Resolve a class reference expression evaluated in ``scope``."""
        ...

    def resolve_type_name(self, name: str, scope: TypeSymbol) -> TypeSymbol | None:
        """Resolve a dotted class name as written in ``scope``'s module."""
        ...

    def constant_value(self, node: Node, scope: TypeSymbol) -> object | None:
        """Evaluate an expression to a compile-time constant, or None."""
        ...

    def lookup_members(
        self,
        container: TypeSymbol,
        name: str,
        declaration_index: int | None = None,
    ) -> list[Symbol]:
        """Return symbols named ``name`` visible in ``container``'s scope.

        Own members come first (restricted to one declaration when
        ``declaration_index`` is given), then inherited ones.
        """
        ...

    def is_accessible(self, symbol: Symbol, from_type: TypeSymbol) -> bool: ...

    def minimal_display_name(self, type_symbol: TypeSymbol, from_type: TypeSymbol) -> str:
        """Shortest name under which ``type_symbol`` is reachable from ``from_type``."""
        ...

    def find_type(self, qualified_name: str) -> TypeSymbol | None: ...


__all__ = ["SemanticModel"]
