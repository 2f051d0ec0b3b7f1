"""Discovery of the Python files a check run binds.

Every file under the project root is a candidate: test modules carry the
decorator usages, and any other module may declare the classes and constants
they reference. Symlinks and paths resolving outside the root are never read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator
    from pathlib import Path

logger = logging.getLogger(__name__)

# Directory names never scanned, whatever .gitignore says.
SKIPPED_DIR_NAMES = frozenset(
    {".git", ".hg", ".venv", "venv", "__pycache__", ".tox", ".nox", "node_modules"}
)


@dataclass(frozen=True)
class SourceFile:
    """A discovered file with its raw content."""

    relative_path: str
    content: bytes


def _should_include_file(
    path: Path,
    directory: Path,
    output_dir: str,
    gitignore_matches: Callable[[str], bool] | None,
    include_patterns: list[str] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    """Return True when the file survives every filter below."""
    if not path.is_file() or path.is_symlink():
        return False

    if not _is_within_root(path, directory):
        return False

    try:
        rel_path = path.relative_to(directory)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if any(part in SKIPPED_DIR_NAMES for part in rel_path.parts[:-1]):
        return False

    if output_dir and rel_path.parts and rel_path.parts[0] == output_dir:
        return False

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    if include_patterns and not any(
        fnmatch(rel_path_str, pat) for pat in include_patterns
    ):
        return False

    has_excluded_match = exclude_patterns and any(
        fnmatch(rel_path_str, pat) for pat in exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {path for path in gitignore_paths if path.is_file()}
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # matcher rooted in a sibling directory
                continue
        return False

    return matches


def find_python_files(
    directory: Path,
    *,
    output_dir: str = ".casesource",
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find the Python files of a project, respecting .gitignore.

    Args:
        directory: Project root
        output_dir: Report directory to skip (default ".casesource")
        include_patterns: Optional list of fnmatch patterns; if provided,
            files must match at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded
        nested_gitignore: Also honour .gitignore files below the root

    Yields:
        Paths sorted by relative path, so module binding and diagnostic
        order do not depend on filesystem iteration order.
    """
    gitignore_matches = _build_gitignore_matcher(
        directory,
        nested_gitignore=nested_gitignore,
    )

    matched_files = [
        path
        for path in directory.rglob("*.py")
        if _should_include_file(
            path,
            directory,
            output_dir,
            gitignore_matches,
            include_patterns,
            exclude_patterns,
        )
    ]

    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


def read_source_files(directory: Path, paths: Iterable[Path]) -> list[SourceFile]:
    """Read discovered files, skipping unreadable ones with a warning."""
    sources: list[SourceFile] = []
    for path in paths:
        relative_path = path.relative_to(directory).as_posix()
        try:
            content = path.read_bytes()
        except OSError as exc:
            logger.warning("skipping unreadable file %s: %s", relative_path, exc)
            continue
        sources.append(SourceFile(relative_path=relative_path, content=content))
    return sources


__all__ = ["SKIPPED_DIR_NAMES", "SourceFile", "find_python_files", "read_source_files"]
