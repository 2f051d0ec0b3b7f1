"""Parsing, binding and name resolution for casesource-check."""

from parse.ast_imports import ImportBinding, extract_import_bindings, resolve_relative_import
from parse.binder import Argument, BoundModule, DecoratorUsage, bind_module
from parse.name_resolution import ModuleSemanticModel, ProjectIndex

__all__ = [
    "Argument",
    "BoundModule",
    "DecoratorUsage",
    "ImportBinding",
    "ModuleSemanticModel",
    "ProjectIndex",
    "bind_module",
    "extract_import_bindings",
    "resolve_relative_import",
]
