"""Deterministic project-wide name resolution over bound modules.

``ProjectIndex`` owns every bound module and answers qualified-name queries.
``ModuleSemanticModel`` implements the analyzer's ``SemanticModel`` protocol
for names as written in one module:

1. class-local names (when the scope is a class of the module)
2. module-level classes and bindings
3. import bindings (following re-exports through package ``__init__``)
4. star imports
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from parse.treesitter_tree import (
    dotted_name,
    literal_string_value,
    named_children,
    node_text,
    unwrap_parentheses,
)
from semantic.symbols import Symbol, TypeSymbol
from utils import split_dotted

if TYPE_CHECKING:
    from tree_sitter import Node

    from parse.binder import BoundModule

logger = logging.getLogger(__name__)

DEFAULT_NAMEOF_FUNCTIONS = ("nameof",)

# Re-export chains longer than this are treated as unresolvable.
_MAX_REEXPORT_DEPTH = 8


def _is_private_name(name: str) -> bool:
    """Name-mangled members (``__x`` but not ``__x__``)."""
    return name.startswith("__") and not name.endswith("__")


class ProjectIndex:
    """Read-only index over all bound modules of a project."""

    def __init__(
        self,
        modules: Iterable[BoundModule],
        nameof_functions: Iterable[str] = DEFAULT_NAMEOF_FUNCTIONS,
    ) -> None:
        self._modules: dict[str, BoundModule] = {}
        self._types: dict[str, TypeSymbol] = {}
        self._constants: dict[str, str] = {}

        for module in sorted(modules, key=lambda bound: bound.path):
            if module.module in self._modules:
                logger.warning(
                    "module %s bound twice (%s, %s); keeping the first",
                    module.module,
                    self._modules[module.module].path,
                    module.path,
                )
                continue
            self._modules[module.module] = module
            self._types.setdefault(module.module, module.module_type)
            for qualified_name, type_symbol in module.types.items():
                self._types.setdefault(qualified_name, type_symbol)
            for qualified_name, value in module.constants.items():
                self._constants.setdefault(qualified_name, value)

        nameof = frozenset(nameof_functions)
        # Models are built eagerly so concurrent readers never mutate the index.
        self._models = {
            name: ModuleSemanticModel(self, module, nameof)
            for name, module in self._modules.items()
        }

    @property
    def modules(self) -> list[BoundModule]:
        return list(self._modules.values())

    def module(self, name: str) -> BoundModule | None:
        return self._modules.get(name)

    def model_for(self, module_name: str) -> ModuleSemanticModel:
        return self._models[module_name]

    def find_type(self, qualified_name: str) -> TypeSymbol | None:
        return self._types.get(qualified_name)

    def find_constant(self, qualified_name: str) -> str | None:
        return self._constants.get(qualified_name)

    def is_known(self, qualified_name: str) -> bool:
        return qualified_name in self._types or qualified_name in self._constants

    def canonicalize(self, qualified_name: str, depth: int = 0) -> str:
        """Follow import re-exports until ``qualified_name`` names a definition.

        ``pkg.Thing`` where ``pkg/__init__.py`` does ``from .impl import Thing``
        canonicalizes to ``pkg.impl.Thing``.
        """
        if self.is_known(qualified_name) or depth >= _MAX_REEXPORT_DEPTH:
            return qualified_name

        parts = qualified_name.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module = self._modules.get(".".join(parts[:split]))
            if module is None:
                continue
            binding = module.imports.get(parts[split])
            if binding is None:
                return qualified_name
            rest = parts[split + 1 :]
            target = ".".join([binding.target, *rest])
            return self.canonicalize(target, depth + 1)
        return qualified_name


class ModuleSemanticModel:
    """``SemanticModel`` for expressions written in one bound module."""

    def __init__(
        self,
        index: ProjectIndex,
        bound: BoundModule,
        nameof_functions: frozenset[str],
    ) -> None:
        self._index = index
        self._bound = bound
        self._nameof_functions = nameof_functions

    @property
    def module(self) -> str:
        return self._bound.module

    def _for_scope(self, scope: TypeSymbol) -> ModuleSemanticModel:
        if scope.module == self._bound.module:
            return self
        return self._index.model_for(scope.module)

    def _qualify(self, parts: list[str], scope: TypeSymbol) -> str | None:
        """Absolute dotted name for ``parts`` as written in ``scope``."""
        first, rest = parts[0], parts[1:]
        bound = self._bound

        candidates: list[str] = []
        if scope.kind == "class":
            candidates.append(f"{scope.qualified_name}.{first}")
        candidates.append(f"{bound.module}.{first}")
        for candidate in candidates:
            if self._index.is_known(candidate):
                return ".".join([candidate, *rest])

        binding = bound.imports.get(first)
        if binding is not None:
            return ".".join([binding.target, *rest])

        for star_module in bound.star_imports:
            candidate = self._index.canonicalize(f"{star_module}.{first}")
            if self._index.is_known(candidate):
                return ".".join([candidate, *rest])

        # Fully qualified reference to a project module, e.g. after `import a.b`
        # bound only `a`.
        if self._index.module(first) is not None:
            return ".".join(parts)
        return None

    def resolve_type_name(self, name: str, scope: TypeSymbol) -> TypeSymbol | None:
        model = self._for_scope(scope)
        if model is not self:
            return model.resolve_type_name(name, scope)

        parts = split_dotted(name)
        if not parts:
            return None
        qualified = self._qualify(parts, scope)
        if qualified is None:
            return None

        found = self._index.find_type(self._index.canonicalize(qualified))
        if found is None or found.kind != "class":
            return None
        return found

    def resolve_type(self, node: Node, scope: TypeSymbol) -> TypeSymbol | None:
        name = dotted_name(node)
        if name is None:
            return None
        return self.resolve_type_name(name, scope)

    def _nameof_target(self, node: Node) -> str | None:
        if node.type != "call":
            return None
        callee = dotted_name(node.child_by_field_name("function"))
        if callee is None or callee.rsplit(".", 1)[-1] not in self._nameof_functions:
            return None
        arguments = node.child_by_field_name("arguments")
        if arguments is None or arguments.type != "argument_list":
            return None
        children = named_children(arguments)
        if len(children) != 1 or children[0].type == "keyword_argument":
            return None
        target = dotted_name(children[0])
        if target is None:
            return None
        return target.rsplit(".", 1)[-1]

    def constant_value(self, node: Node, scope: TypeSymbol) -> object | None:
        model = self._for_scope(scope)
        if model is not self:
            return model.constant_value(node, scope)

        node = unwrap_parentheses(node)
        literal = literal_string_value(node)
        if literal is not None:
            return literal

        if node.type == "binary_operator":
            operator = node.child_by_field_name("operator")
            left = node.child_by_field_name("left")
            right = node.child_by_field_name("right")
            if operator is None or left is None or right is None:
                return None
            if node_text(operator) != "+":
                return None
            left_value = self.constant_value(left, scope)
            right_value = self.constant_value(right, scope)
            if isinstance(left_value, str) and isinstance(right_value, str):
                return left_value + right_value
            return None

        if node.type == "call":
            return self._nameof_target(node)

        name = dotted_name(node)
        if name is None:
            return None
        parts = split_dotted(name)
        if not parts:
            return None
        qualified = self._qualify(parts, scope)
        if qualified is None:
            return None
        return self._index.find_constant(self._index.canonicalize(qualified))

    def lookup_members(
        self,
        container: TypeSymbol,
        name: str,
        declaration_index: int | None = None,
    ) -> list[Symbol]:
        if declaration_index is None:
            declarations = container.declarations
        else:
            declarations = (container.declarations[declaration_index],)

        found: list[Symbol] = [
            member
            for declaration in declarations
            for member in declaration.members
            if member.name == name
        ]
        nested = self._index.find_type(f"{container.qualified_name}.{name}")
        if nested is not None and nested.kind == "class":
            found.append(nested)
        found.extend(self._inherited_members(container, name, {container.qualified_name}))
        return found

    def _inherited_members(
        self, container: TypeSymbol, name: str, seen: set[str]
    ) -> list[Symbol]:
        found: list[Symbol] = []
        for base in container.bases:
            base_type = self.resolve_type_name(base, container)
            if base_type is None or base_type.qualified_name in seen:
                continue
            seen.add(base_type.qualified_name)
            found.extend(member for member in base_type.members if member.name == name)
            found.extend(self._inherited_members(base_type, name, seen))
        return found

    def is_accessible(self, symbol: Symbol, from_type: TypeSymbol) -> bool:
        if not _is_private_name(symbol.name):
            return True
        owner = symbol.owner
        return from_type.qualified_name == owner or from_type.qualified_name.startswith(
            f"{owner}."
        )

    def minimal_display_name(self, type_symbol: TypeSymbol, from_type: TypeSymbol) -> str:
        model = self._for_scope(from_type)
        if model is not self:
            return model.minimal_display_name(type_symbol, from_type)

        qualified = type_symbol.qualified_name
        module_prefix = f"{self._bound.module}."
        if qualified.startswith(module_prefix):
            return qualified[len(module_prefix) :]

        candidates: list[str] = []
        for local, binding in self._bound.imports.items():
            target = self._index.canonicalize(binding.target)
            if target == qualified:
                candidates.append(local)
            elif binding.kind == "module" and qualified.startswith(f"{binding.target}."):
                candidates.append(local + qualified[len(binding.target) :])
        if not candidates:
            return qualified
        return min(candidates, key=lambda candidate: (len(candidate), candidate))

    def find_type(self, qualified_name: str) -> TypeSymbol | None:
        return self._index.find_type(qualified_name)


__all__ = [
    "DEFAULT_NAMEOF_FUNCTIONS",
    "ModuleSemanticModel",
    "ProjectIndex",
]
