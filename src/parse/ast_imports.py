"""AST-based import analysis for name resolution.

Only imports that bind names in the module namespace are collected: imports
inside function bodies are local to the function and never name a case
source.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import Literal

_FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda)


@dataclass(frozen=True)
class ImportBinding:
    """A module-level name bound by an import statement.

    ``target`` is the absolute dotted name the local name refers to: a module
    for ``import x`` forms, ``module.member`` for ``from`` forms.
    """

    local_name: str
    target: str
    kind: Literal["module", "member"]
    line: int


def _module_level_imports(tree: ast.Module) -> list[ast.Import | ast.ImportFrom]:
    found: list[ast.Import | ast.ImportFrom] = []
    stack: list[ast.AST] = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            found.append(node)
            continue
        if isinstance(node, _FUNCTION_NODES):
            continue
        stack.extend(ast.iter_child_nodes(node))
    found.sort(key=lambda node: (node.lineno, node.col_offset))
    return found


def _process_import_node(node: ast.Import, bindings: dict[str, ImportBinding]) -> None:
    """Process a standard import node (import x, import x.y as z)."""
    for name in node.names:
        if name.asname:
            bindings[name.asname] = ImportBinding(
                name.asname, name.name, "module", node.lineno
            )
        else:
            # `import a.b` binds `a`
            head = name.name.split(".", 1)[0]
            bindings[head] = ImportBinding(head, head, "module", node.lineno)


def _process_import_from_node(
    node: ast.ImportFrom,
    bindings: dict[str, ImportBinding],
    star_imports: list[str],
    module_name: str,
    is_package: bool,
) -> None:
    """Process a from-import node (from x import y)."""
    module = node.module or ""
    if node.level > 0:
        module = resolve_relative_import(module_name, module, node.level, is_package)

    for name in node.names:
        if name.name == "*":
            if module not in star_imports:
                star_imports.append(module)
            continue
        local = name.asname or name.name
        bindings[local] = ImportBinding(local, f"{module}.{name.name}", "member", node.lineno)


def extract_import_bindings(
    source: str,
    module_name: str,
    filename: str = "<unknown>",
    is_package: bool = False,
) -> tuple[dict[str, ImportBinding], list[str]]:
    """Extract module-level import bindings from Python source.

    Args:
        source: Module source text
        module_name: Dotted name of the module, used to resolve relative imports
        filename: Name reported in syntax errors
        is_package: True when the module is a package ``__init__``

    Returns:
        A mapping of local name to binding (later imports win) and the list of
        modules imported with ``from x import *``.
    """
    bindings: dict[str, ImportBinding] = {}
    star_imports: list[str] = []

    try:
        tree = ast.parse(source, filename)
    except SyntaxError:
        # Invalid syntax: treat as no imports to keep scans deterministic.
        return bindings, star_imports

    for node in _module_level_imports(tree):
        if isinstance(node, ast.Import):
            _process_import_node(node, bindings)
        else:
            _process_import_from_node(node, bindings, star_imports, module_name, is_package)

    return bindings, star_imports


def resolve_relative_import(
    importing_module: str,
    relative_module: str,
    level: int,
    is_package: bool = False,
) -> str:
    """Resolve a relative import to an absolute module name.

    Args:
        importing_module: The module doing the import (e.g., "pkg.sub.mod")
        relative_module: The relative module name (e.g., "foo" from ".foo")
        level: Number of dots (1 for ".", 2 for "..", etc.)
        is_package: True when importing_module is a package ``__init__``,
            whose own name is the package the dots count from

    Returns:
        Absolute module name (e.g., "pkg.sub.foo")

    Examples:
        >>> resolve_relative_import("pkg.sub.mod", "foo", 1)
        'pkg.sub.foo'
        >>> resolve_relative_import("pkg.sub.mod", "", 1)
        'pkg.sub'
        >>> resolve_relative_import("pkg.sub", "foo", 1, is_package=True)
        'pkg.sub.foo'
    """
    parts = importing_module.split(".")
    if is_package:
        level -= 1

    if level > len(parts):
        return relative_module or importing_module

    base_parts = parts[: len(parts) - level]

    if relative_module:
        return ".".join([*base_parts, relative_module])
    if base_parts:
        return ".".join(base_parts)
    return importing_module


__all__ = ["ImportBinding", "extract_import_bindings", "resolve_relative_import"]
