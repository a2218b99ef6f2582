"""
Configuration loader for YAML and JSON files.

Loads and validates application settings and pattern files into Pydantic models.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
import yaml
from pydantic import ValidationError

from .models import AppConfig, PatternSet

if TYPE_CHECKING:
    from typing import Any


DEFAULT_APP_CONFIG = Path("sievepath.yaml")

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or validation error."""

    def __init__(self, message: str, path: Path | None = None, details: str | None = None):
        self.path = path
        self.details = details
        super().__init__(message)


def _load_data_file(path: Path) -> Any:
    """Load a YAML or JSON file.

    Args:
        path: Path to the file (.json is read with orjson, anything else as YAML)

    Returns:
        Parsed contents

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}", path=path)

    try:
        if path.suffix.lower() == ".json":
            return orjson.loads(path.read_bytes())
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if data is not None else {}
    except orjson.JSONDecodeError as e:
        raise ConfigError(
            f"Invalid JSON in {path}",
            path=path,
            details=str(e),
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in {path}",
            path=path,
            details=str(e),
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read {path}",
            path=path,
            details=str(e),
        ) from e


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in string values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    def replacer(match: re.Match[str]) -> str:
        return os.environ.get(match.group(1), match.group(2) or "")

    if isinstance(data, str):
        return _ENV_PATTERN.sub(replacer, data)
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    return data


def _as_pattern_set_data(data: Any) -> Any:
    # A bare list of descriptors is accepted as shorthand
    if isinstance(data, list):
        return {"fields": data}
    return data


def load_app_config(
    path: Path | str | None = None,
    expand_env: bool = True,
) -> AppConfig:
    """Load application configuration from a YAML file.

    Args:
        path: Path to the config file (default: ./sievepath.yaml)
        expand_env: Whether to expand environment variables

    Returns:
        Validated AppConfig instance (defaults when the file does not exist)

    Raises:
        ConfigError: If configuration is invalid
    """
    path = DEFAULT_APP_CONFIG if path is None else Path(path)

    if not path.exists():
        return AppConfig()

    data = _load_data_file(path)

    if expand_env:
        data = _expand_env_vars(data)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid app configuration in {path}",
            path=path,
            details=str(e),
        ) from e


def load_pattern_set(
    path: Path | str,
    expand_env: bool = True,
) -> PatternSet:
    """Load a pattern file.

    The file holds either a mapping with a ``fields`` list (plus optional
    ``name``, ``url``, ``content_type`` and ``engine``) or a bare list of
    field descriptors.

    Args:
        path: Path to a YAML or JSON pattern file
        expand_env: Whether to expand environment variables

    Returns:
        Validated PatternSet instance

    Raises:
        ConfigError: If the file is missing, unparseable or invalid
    """
    path = Path(path)
    data = _as_pattern_set_data(_load_data_file(path))

    if expand_env:
        data = _expand_env_vars(data)

    try:
        return PatternSet.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid pattern file {path}",
            path=path,
            details=str(e),
        ) from e


def validate_pattern_file(path: Path | str) -> list[str]:
    """Validate a pattern file without loading it.

    Useful for dry-run validation.

    Args:
        path: Path to a YAML or JSON pattern file

    Returns:
        List of validation error messages (empty if valid)
    """
    path = Path(path)
    errors: list[str] = []

    if not path.exists():
        errors.append(f"File not found: {path}")
        return errors

    try:
        data = _as_pattern_set_data(_load_data_file(path))
    except ConfigError as e:
        errors.append(str(e))
        return errors

    try:
        PatternSet.model_validate(data)
    except ValidationError as e:
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"]) or "<root>"
            errors.append(f"{loc}: {error['msg']}")

    return errors
