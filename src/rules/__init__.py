"""Configuration for casesource-check."""

from rules.config import (
    CONFIG_FILENAME,
    CheckerConfig,
    ConfigError,
    DiagnosticSetting,
    load_config,
    resolve_output_dir,
)

__all__ = [
    "CONFIG_FILENAME",
    "CheckerConfig",
    "ConfigError",
    "DiagnosticSetting",
    "load_config",
    "resolve_output_dir",
]
