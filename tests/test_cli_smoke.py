from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from cli import EXIT_CONFIG_ERROR, EXIT_DIAGNOSTICS, EXIT_OK, main
from report.write import DIAGNOSTICS_FILENAME, SUMMARY_FILENAME, load_diagnostics
from rules.config import CONFIG_FILENAME, ConfigError, load_config, resolve_output_dir


def _write_minimal_repo(root: Path) -> None:
    (root / "pkg").mkdir(parents=True, exist_ok=True)
    (root / "pkg" / "__init__.py").write_text("", encoding="utf-8")
    (root / "pkg" / "module.py").write_text(
        '"""Minimal module."""\n',
        encoding="utf-8",
    )


def _copy_mini_repo_fixture(root: Path) -> None:
    fixture_repo = Path(__file__).parent / "fixtures" / "mini_repo"
    shutil.copytree(fixture_repo, root)


def test_cli_check_clean_repo_smoke(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)

    exit_code = main(["check", str(repo_root)])

    assert exit_code == EXIT_OK
    assert capsys.readouterr().out == ""
    assert not (repo_root / load_config(repo_root).output_dir).exists()


def test_cli_check_fixture_reports_text_lines(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    _copy_mini_repo_fixture(repo_root)

    exit_code = main(["check", str(repo_root)])

    assert exit_code == EXIT_DIAGNOSTICS
    assert capsys.readouterr().out.splitlines() == [
        "pkg_a/checks.py:7:31: warning[CSRC001] "
        'Consider using nameof(SharedCases.Cases) instead of "Cases".',
        "pkg_a/checks.py:15:18: error[CSRC003] "
        "The source type 'NotIterable' does not implement __iter__.",
    ]


def test_cli_check_json_format(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    _copy_mini_repo_fixture(repo_root)

    exit_code = main(["check", str(repo_root), "--format", "json"])

    assert exit_code == EXIT_DIAGNOSTICS
    records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [record["id"] for record in records] == ["CSRC001", "CSRC003"]
    assert records[0]["properties"] == {"name_of_target": "SharedCases.Cases"}
    assert records[0]["span"]["path"] == "pkg_a/checks.py"


def test_readme_check_write_default_output_dir_from_fixture(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_mini_repo_fixture(repo_root)

    assert not (repo_root / ".casesource").exists(), "output dir must not pre-exist"
    exit_code = main(["check", str(repo_root), "--write"])

    default_out_dir = repo_root / ".casesource"
    assert exit_code == EXIT_DIAGNOSTICS
    assert sorted(path.name for path in default_out_dir.iterdir()) == [
        DIAGNOSTICS_FILENAME,
        SUMMARY_FILENAME,
    ]


def test_readme_check_out_dir_flag_from_fixture(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _copy_mini_repo_fixture(repo_root)

    custom_out_dir = tmp_path / "custom-reports"
    assert not custom_out_dir.exists(), "custom output dir must not pre-exist"
    exit_code = main(["check", str(repo_root), "--out-dir", str(custom_out_dir)])

    assert exit_code == EXIT_DIAGNOSTICS
    records = load_diagnostics(custom_out_dir / DIAGNOSTICS_FILENAME)
    assert [record.id for record in records] == ["CSRC001", "CSRC003"]
    summary = json.loads((custom_out_dir / SUMMARY_FILENAME).read_text(encoding="utf-8"))
    assert summary["files_scanned"] == 3
    assert summary["usages_analyzed"] == 3
    assert summary["by_severity"] == {"error": 1, "warning": 1}


def test_cli_check_severity_overrides_change_exit_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    _copy_mini_repo_fixture(repo_root)
    (repo_root / CONFIG_FILENAME).write_text(
        '[diagnostics]\nCSRC001 = "off"\nCSRC003 = "warning"\n',
        encoding="utf-8",
    )

    exit_code = main(["check", str(repo_root)])

    assert exit_code == EXIT_OK
    assert capsys.readouterr().out.splitlines() == [
        "pkg_a/checks.py:15:18: warning[CSRC003] "
        "The source type 'NotIterable' does not implement __iter__.",
    ]


def test_cli_check_invalid_config_reports_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)
    (repo_root / CONFIG_FILENAME).write_text("bogus_key = true\n", encoding="utf-8")

    exit_code = main(["check", str(repo_root)])

    assert exit_code == EXIT_CONFIG_ERROR
    captured = capsys.readouterr()
    assert captured.err.startswith("error: Invalid config in ")
    assert CONFIG_FILENAME in captured.err


def test_cli_check_escaping_output_dir_reports_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)
    (repo_root / CONFIG_FILENAME).write_text(
        'output_dir = "../outside"\n', encoding="utf-8"
    )

    monkeypatch.chdir(repo_root)
    exit_code = main(["check", "--write"])

    assert exit_code == EXIT_CONFIG_ERROR
    assert "escapes the project root" in capsys.readouterr().err
    assert not (tmp_path / "outside").exists()


def test_cli_rules_lists_every_diagnostic(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["rules"])

    assert exit_code == EXIT_OK
    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[0] for line in lines] == [f"CSRC00{n}" for n in range(1, 9)]
    assert lines[0].split()[1] == "warning"
    assert all(line.split()[1] == "error" for line in lines[1:])


def test_resolve_output_dir_rejects_escape(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    with pytest.raises(ConfigError, match="escapes the project root"):
        resolve_output_dir(repo_root, "../outside")


def test_resolve_output_dir_rejects_absolute_paths(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="relative path"):
        resolve_output_dir(tmp_path, str(tmp_path / "abs"))
