from __future__ import annotations

from pathlib import Path

import pytest

from analysis.extract import SourceReference
from analysis.host import build_project_index
from analysis.resolve import resolve_member
from parse.name_resolution import ProjectIndex
from scan.files import find_python_files, read_source_files

_SOURCE = """class Base:
    Inherited = [1]


class Source(Base):
    def Cases(self):
        return []

    @property
    def Prop(self) -> list[int]:
        return []

    def Prop(self):
        return []

    class Nested:
        pass


class Source:
    Cases = [1]


class OnlyMethod:
    @staticmethod
    def Cases():
        return []

    class Cases:
        pass
"""


def _write_python_file(repo_root: Path, relative_path: str, source: str) -> Path:
    path = repo_root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


@pytest.fixture
def index(tmp_path: Path) -> ProjectIndex:
    _write_python_file(tmp_path, "sample.py", _SOURCE)
    return build_project_index(read_source_files(tmp_path, find_python_files(tmp_path)))


def _resolve(index: ProjectIndex, type_name: str, member_name: str):
    declaring_type = index.find_type(f"sample.{type_name}")
    assert declaring_type is not None
    reference = SourceReference(declaring_type=declaring_type, member_name=member_name)
    return resolve_member(reference, index.model_for("sample"))


def test_field_wins_across_declarations(index: ProjectIndex) -> None:
    member = _resolve(index, "Source", "Cases")

    assert member is not None
    assert member.kind == "field"


def test_property_wins_over_method(index: ProjectIndex) -> None:
    member = _resolve(index, "Source", "Prop")

    assert member is not None
    assert member.kind == "property"


def test_method_is_found_and_nested_classes_are_ignored(index: ProjectIndex) -> None:
    member = _resolve(index, "OnlyMethod", "Cases")

    assert member is not None
    assert member.kind == "method"
    assert _resolve(index, "Source", "Nested") is None


def test_inherited_members_resolve(index: ProjectIndex) -> None:
    member = _resolve(index, "Source", "Inherited")

    assert member is not None
    assert member.owner == "sample.Base"


@pytest.mark.parametrize("member_name", ["Missing", "not valid", "class", ""])
def test_unresolvable_names(index: ProjectIndex, member_name: str) -> None:
    assert _resolve(index, "Source", member_name) is None


def test_subclass_members_hide_base_members(tmp_path: Path) -> None:
    _write_python_file(
        tmp_path,
        "sample.py",
        "class Base:\n"
        "    Cases = [1]\n"
        "    Shared = [2]\n"
        "\n"
        "\n"
        "class Middle(Base):\n"
        "    @property\n"
        "    def Shared(self) -> list[int]:\n"
        "        return []\n"
        "\n"
        "\n"
        "class Derived(Middle):\n"
        "    @staticmethod\n"
        "    def Cases():\n"
        "        return []\n",
    )
    index = build_project_index(read_source_files(tmp_path, find_python_files(tmp_path)))

    cases = _resolve(index, "Derived", "Cases")
    shared = _resolve(index, "Derived", "Shared")

    assert cases is not None
    assert (cases.kind, cases.owner) == ("method", "sample.Derived")
    assert shared is not None
    assert (shared.kind, shared.owner) == ("property", "sample.Middle")
