"""Shared utilities for casesource-check."""

from __future__ import annotations

import keyword
from pathlib import Path


def path_to_module(file_path: str | Path) -> str:
    """Convert a file path to a Python module name.

    Args:
        file_path: Relative file path (e.g., "src/pkg/test_cases.py" or Path object)

    Returns:
        Module name (e.g., "pkg.test_cases")

    Raises:
        ValueError: If the path does not yield a non-empty module name.

    Examples:
        >>> path_to_module("src/pkg/test_cases.py")
        'pkg.test_cases'
        >>> path_to_module("tests/__init__.py")
        'tests'
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    normalized_parts = [part for part in path_str.replace("\\", "/").split("/") if part]

    # src/<package>/... maps to <package>.<submodules>
    module_parts = (
        normalized_parts[1:]
        if len(normalized_parts) >= 2 and normalized_parts[0] == "src"
        else normalized_parts
    )

    if module_parts and module_parts[-1].endswith(".py"):
        module_parts[-1] = module_parts[-1][:-3]

    if module_parts and module_parts[-1] == "__init__":
        module_parts = module_parts[:-1]

    if not module_parts:
        msg = f"path {path_str!r} must map to a non-empty module name"
        raise ValueError(msg)

    return ".".join(module_parts)


def is_valid_identifier(name: str | None) -> bool:
    """Return True when name could name a Python attribute."""
    return bool(name) and name.isidentifier() and not keyword.iskeyword(name)


def split_dotted(expr: str) -> list[str]:
    """Split a dotted expression into its identifier parts.

    Returns an empty list when any part is not an identifier, so callers can
    treat subscripts, calls and other dynamic shapes as unresolvable.
    """
    parts = [part.strip() for part in expr.strip().split(".")]
    if not parts or not all(part.isidentifier() for part in parts):
        return []
    return parts
