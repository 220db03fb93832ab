"""Configuration management for pls-release."""

from __future__ import annotations

from pls_release.config.loader import (
    CONFIG_PATH,
    generate_config_file,
    load_config,
    parse_config,
)
from pls_release.config.models import PlsConfig, Strategy

__all__ = [
    "CONFIG_PATH",
    "PlsConfig",
    "Strategy",
    "generate_config_file",
    "load_config",
    "parse_config",
]
