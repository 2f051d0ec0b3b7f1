from __future__ import annotations

from pathlib import Path

import pytest

from rules.config import CONFIG_FILENAME, ConfigError, load_config


def _write_config(repo_root: Path, toml_content: str) -> None:
    (repo_root / CONFIG_FILENAME).write_text(toml_content, encoding="utf-8")


def test_layers_section_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[layers]
unclassified = "deny"
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "bogus_key = true")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "exclude = [")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_valid_config_accepted(tmp_path: Path) -> None:
    _write_config(tmp_path, 'exclude = [".venv/**"]')

    config = load_config(tmp_path)

    assert config.exclude == [".venv/**"]


def test_unknown_diagnostic_id_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[diagnostics]
CSRC999 = "off"
""".strip(),
    )

    with pytest.raises(ConfigError, match="Unknown diagnostic id 'CSRC999'"):
        load_config(tmp_path)


def test_invalid_severity_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[diagnostics]
CSRC001 = "fatal"
""".strip(),
    )

    with pytest.raises(ConfigError, match="Invalid severity 'fatal'"):
        load_config(tmp_path)


def test_valid_diagnostics_config_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
decorators = ["case_source", "cases_from"]
nameof_functions = ["nameof", "member_name"]
max_workers = 2

[diagnostics]
CSRC001 = "off"
CSRC005 = "warning"
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.decorators == ["case_source", "cases_from"]
    assert config.nameof_functions == ["nameof", "member_name"]
    assert config.max_workers == 2
    assert config.diagnostics == {"CSRC001": "off", "CSRC005": "warning"}


@pytest.mark.parametrize(
    "toml_content",
    [
        "decorators = []",
        'decorators = ["not-an-identifier"]',
        'nameof_functions = ["class"]',
        "max_workers = 0",
    ],
)
def test_invalid_values_rejected(tmp_path: Path, toml_content: str) -> None:
    _write_config(tmp_path, toml_content)

    with pytest.raises(ConfigError, match="Invalid config"):
        load_config(tmp_path)


def test_empty_config_accepted(tmp_path: Path) -> None:
    _write_config(tmp_path, "")

    config = load_config(tmp_path)

    assert config.output_dir == ".casesource"
    assert config.include == []
    assert config.exclude == []
    assert config.decorators == ["case_source", "test_case_source"]
    assert config.nameof_functions == ["nameof"]
    assert config.max_workers is None
    assert config.diagnostics == {}


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.output_dir == ".casesource"
