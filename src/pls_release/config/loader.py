"""Configuration loading.

Lookup order:
    1. ``.pls/config.json``
    2. ``[tool.pls]`` in ``pyproject.toml``
    3. built-in defaults
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pls_release.config.models import PlsConfig
from pls_release.exceptions import ConfigError, ConfigValidationError
from pls_release.logging import get_logger

logger = get_logger(__name__)

CONFIG_PATH = ".pls/config.json"
PYPROJECT_SECTION = "pls"


def parse_config(content: str) -> PlsConfig:
    """Parse and validate JSON config content.

    Raises:
        ConfigError: If the content is not valid JSON
        ConfigValidationError: If a field has an invalid value
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"Invalid {CONFIG_PATH}: not valid JSON ({e.msg})",
            code="CONFIG_PARSE_ERROR",
            path=CONFIG_PATH,
        ) from e

    if not isinstance(data, dict):
        raise ConfigValidationError(f"Invalid {CONFIG_PATH}: expected a JSON object", path=CONFIG_PATH)

    return validate_config(data, source=CONFIG_PATH)


def validate_config(data: dict[str, Any], *, source: str) -> PlsConfig:
    """Validate a raw config mapping.

    Raises:
        ConfigValidationError: If a field has an invalid value
    """
    try:
        return PlsConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        fields = ", ".join(err["field"] for err in errors)
        raise ConfigValidationError(
            f"Invalid config in {source}: {fields}",
            source=source,
            errors=errors,
        ) from e


def load_pyproject_section(pyproject_path: Path) -> dict[str, Any] | None:
    """Return the ``[tool.pls]`` table, or None if absent.

    Raises:
        ConfigError: If pyproject.toml cannot be parsed
    """
    try:
        with pyproject_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(
            f"Invalid TOML in {pyproject_path}: {e}",
            code="CONFIG_PARSE_ERROR",
            path=str(pyproject_path),
        ) from e

    section = data.get("tool", {}).get(PYPROJECT_SECTION)
    return section if isinstance(section, dict) else None


def load_config(root: Path) -> PlsConfig:
    """Load configuration for the repository at ``root``.

    Args:
        root: Repository root directory

    Returns:
        Validated configuration, defaults if no config is present
    """
    config_path = root / CONFIG_PATH
    if config_path.is_file():
        logger.debug("config_loaded", source=str(config_path))
        return parse_config(config_path.read_text(encoding="utf-8"))

    pyproject_path = root / "pyproject.toml"
    if pyproject_path.is_file():
        section = load_pyproject_section(pyproject_path)
        if section is not None:
            logger.debug("config_loaded", source=f"{pyproject_path} [tool.{PYPROJECT_SECTION}]")
            return validate_config(section, source=str(pyproject_path))

    logger.debug("config_defaults")
    return PlsConfig()


def generate_config_file(config: PlsConfig) -> str:
    """Render a config file containing only non-default values."""
    data = config.model_dump(by_alias=True, exclude_defaults=True, exclude_none=True)
    return json.dumps(data, indent=2) + "\n"
