"""Project configuration loaded from ``casesource.toml``."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, get_args

import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from contract.descriptors import DESCRIPTORS_BY_ID
from utils import is_valid_identifier

CONFIG_FILENAME = "casesource.toml"

DiagnosticSetting = Literal["error", "warning", "info", "off"]

VALID_DIAGNOSTIC_SETTINGS = frozenset(get_args(DiagnosticSetting))


class CheckerConfig(BaseModel):
    """Configuration for a casesource-check run."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default=".casesource",
        description="Output directory for written reports",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all Python files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    decorators: list[str] = Field(
        default_factory=lambda: ["case_source", "test_case_source"],
        description="Decorator names (last dotted segment) treated as case sources",
    )
    nameof_functions: list[str] = Field(
        default_factory=lambda: ["nameof"],
        description="Functions whose single argument yields a symbolic member name",
    )
    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Worker threads for usage analysis (default: executor default)",
    )
    diagnostics: dict[str, DiagnosticSetting] = Field(
        default_factory=dict,
        description="Per-diagnostic severity override: id -> error|warning|info|off",
    )

    @field_validator("decorators", "nameof_functions")
    @classmethod
    def validate_names(cls, v: list[str]) -> list[str]:
        if not v:
            msg = "must name at least one function"
            raise ValueError(msg)
        for name in v:
            if not is_valid_identifier(name):
                msg = f"'{name}' is not a valid Python identifier"
                raise ValueError(msg)
        return v

    @field_validator("diagnostics", mode="before")
    @classmethod
    def validate_diagnostics(cls, v: Any) -> Any:
        """Validate diagnostic ids and severity settings.

        Runs in `mode="before"` so errors quote the raw TOML values.
        """
        if v is None:
            return {}

        if not isinstance(v, dict):
            msg = "diagnostics must be a mapping of diagnostic id -> severity"
            raise ValueError(msg)

        for diagnostic_id, setting in v.items():
            if diagnostic_id not in DESCRIPTORS_BY_ID:
                msg = (
                    f"Unknown diagnostic id '{diagnostic_id}'. "
                    f"Valid ids: {', '.join(sorted(DESCRIPTORS_BY_ID))}"
                )
                raise ValueError(msg)
            if setting not in VALID_DIAGNOSTIC_SETTINGS:
                msg = (
                    f"Invalid severity '{setting}' for '{diagnostic_id}'. "
                    f"Valid values: {', '.join(sorted(VALID_DIAGNOSTIC_SETTINGS))}"
                )
                raise ValueError(msg)

        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the project root.

    The config output_dir must be a non-empty relative path that remains
    within the project root after resolution. Absolute paths and paths
    that escape the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    if output_dir.startswith("~"):
        msg = "output_dir must be a relative path within the project root"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_path.is_absolute():
        msg = "output_dir must be a relative path within the project root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the project root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> CheckerConfig:
    """Load configuration from casesource.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return CheckerConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return CheckerConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
