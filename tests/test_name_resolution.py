from __future__ import annotations

from pathlib import Path

from analysis.host import build_project_index
from parse.binder import DecoratorUsage
from parse.name_resolution import ProjectIndex
from scan.files import find_python_files, read_source_files
from semantic.symbols import FieldSymbol


def _write_python_file(repo_root: Path, relative_path: str, source: str) -> Path:
    path = repo_root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


def _build_index(repo_root: Path) -> ProjectIndex:
    sources = read_source_files(repo_root, find_python_files(repo_root))
    return build_project_index(sources)


def _usages(index: ProjectIndex, module: str) -> list[DecoratorUsage]:
    bound = index.module(module)
    assert bound is not None
    return list(bound.usages)


def _write_shared_package(repo_root: Path) -> None:
    _write_python_file(repo_root, "pkg/__init__.py", "from .shared import SharedCases\n")
    _write_python_file(
        repo_root,
        "pkg/shared.py",
        'NAME = "Cases"\n\n\nclass SharedCases:\n    Cases = [1, 2]\n',
    )


def test_resolves_imported_class_names(tmp_path: Path) -> None:
    _write_shared_package(tmp_path)
    _write_python_file(
        tmp_path,
        "tests/test_imports.py",
        "import pkg.shared\n"
        "import pkg.shared as shared_module\n"
        "from pkg.shared import SharedCases\n"
        "from pkg.shared import SharedCases as Aliased\n",
    )
    index = _build_index(tmp_path)
    model = index.model_for("tests.test_imports")
    scope = index.module("tests.test_imports").module_type

    for name in ("SharedCases", "Aliased", "shared_module.SharedCases", "pkg.shared.SharedCases"):
        resolved = model.resolve_type_name(name, scope)
        assert resolved is not None, name
        assert resolved.qualified_name == "pkg.shared.SharedCases"


def test_follows_package_reexports(tmp_path: Path) -> None:
    _write_shared_package(tmp_path)
    _write_python_file(tmp_path, "tests/test_reexport.py", "from pkg import SharedCases\n")
    index = _build_index(tmp_path)
    model = index.model_for("tests.test_reexport")
    scope = index.module("tests.test_reexport").module_type

    resolved = model.resolve_type_name("SharedCases", scope)

    assert resolved is not None
    assert resolved.qualified_name == "pkg.shared.SharedCases"
    assert model.minimal_display_name(resolved, scope) == "SharedCases"


def test_unresolvable_names_resolve_to_none(tmp_path: Path) -> None:
    _write_python_file(tmp_path, "sample.py", "import external\n\nVALUE = 1\n")
    index = _build_index(tmp_path)
    model = index.model_for("sample")
    scope = index.module("sample").module_type

    assert model.resolve_type_name("external.Thing", scope) is None
    assert model.resolve_type_name("Missing", scope) is None
    assert model.resolve_type_name("list[int]", scope) is None


def test_constant_value_evaluates_literals_constants_and_nameof(tmp_path: Path) -> None:
    _write_shared_package(tmp_path)
    _write_python_file(
        tmp_path,
        "tests/test_constants.py",
        "from pkg.shared import NAME, SharedCases\n"
        "\n"
        'LOCAL = "Local"\n'
        "\n"
        "\n"
        "class Tests:\n"
        '    INNER = "Inner"\n'
        "\n"
        '    @case_source("Lit" "eral")\n'
        "    def test_a(self, value): ...\n"
        "\n"
        "    @case_source(NAME)\n"
        "    def test_b(self, value): ...\n"
        "\n"
        "    @case_source(LOCAL + INNER)\n"
        "    def test_c(self, value): ...\n"
        "\n"
        "    @case_source(nameof(SharedCases.Cases))\n"
        "    def test_d(self, value): ...\n"
        "\n"
        '    @case_source(f"{LOCAL}")\n'
        "    def test_e(self, value): ...\n"
        "\n"
        "    @case_source(len(LOCAL))\n"
        "    def test_f(self, value): ...\n",
    )
    index = _build_index(tmp_path)
    model = index.model_for("tests.test_constants")
    usages = _usages(index, "tests.test_constants")

    values = [
        model.constant_value(usage.arguments[0].node, usage.enclosing_type)
        for usage in usages
    ]

    assert values == ["Literal", "Cases", "LocalInner", "Cases", None, None]


def test_lookup_members_includes_inherited_members(tmp_path: Path) -> None:
    _write_python_file(
        tmp_path,
        "sample.py",
        "class Base:\n"
        "    Cases = [1]\n"
        "\n"
        "\n"
        "class Derived(Base):\n"
        "    class Cases:\n"
        "        pass\n",
    )
    index = _build_index(tmp_path)
    model = index.model_for("sample")
    derived = index.find_type("sample.Derived")
    assert derived is not None

    found = model.lookup_members(derived, "Cases")

    kinds = [(symbol.kind, symbol.owner) for symbol in found]
    assert kinds == [("class", "sample.Derived"), ("field", "sample.Base")]
    assert isinstance(found[1], FieldSymbol)


def test_private_members_are_only_accessible_from_their_owner(tmp_path: Path) -> None:
    _write_python_file(
        tmp_path,
        "sample.py",
        "class Source:\n"
        "    __hidden = [1]\n"
        "    visible = [2]\n"
        "    __dunder__ = [3]\n"
        "\n"
        "    class Nested:\n"
        "        pass\n"
        "\n"
        "\n"
        "class Other:\n"
        "    pass\n",
    )
    index = _build_index(tmp_path)
    model = index.model_for("sample")
    source = index.find_type("sample.Source")
    nested = index.find_type("sample.Source.Nested")
    other = index.find_type("sample.Other")
    assert source is not None
    assert nested is not None
    assert other is not None

    hidden = model.lookup_members(source, "__hidden")[0]
    visible = model.lookup_members(source, "visible")[0]
    dunder = model.lookup_members(source, "__dunder__")[0]

    assert model.is_accessible(hidden, source)
    assert model.is_accessible(hidden, nested)
    assert not model.is_accessible(hidden, other)
    assert model.is_accessible(visible, other)
    assert model.is_accessible(dunder, other)


def test_minimal_display_name_prefers_shortest_reachable_name(tmp_path: Path) -> None:
    _write_shared_package(tmp_path)
    _write_python_file(
        tmp_path,
        "tests/test_display.py",
        "import pkg.shared as shared_module\n"
        "\n"
        "\n"
        "class Outer:\n"
        "    class Inner:\n"
        "        pass\n",
    )
    index = _build_index(tmp_path)
    model = index.model_for("tests.test_display")
    scope = index.module("tests.test_display").module_type
    shared = index.find_type("pkg.shared.SharedCases")
    inner = index.find_type("tests.test_display.Outer.Inner")
    assert shared is not None
    assert inner is not None

    assert model.minimal_display_name(shared, scope) == "shared_module.SharedCases"
    assert model.minimal_display_name(inner, scope) == "Outer.Inner"
