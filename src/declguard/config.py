"""Run configuration.

A run is configured from three layers, later layers overriding earlier
ones:

1. A configuration file (YAML, JSON or TOML, detected from the extension).
2. Environment variables with the ``DECLGUARD_`` prefix.
3. Options given on the command line.

Keys may be written in camelCase (``flatOut``), kebab-case (``flat-out``)
or snake_case (``flat_out``).

Example:
    >>> config = load_run_config(
    ...     config_path="declguard.yaml",
    ...     overrides={"verbose": True},
    ... )
    >>> config.previous
    'api/1.0.json'
"""

from __future__ import annotations

import json
import logging
import os
import re
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from declguard.errors import DeclguardError

logger = logging.getLogger(__name__)

ENV_PREFIX = "DECLGUARD_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# =============================================================================
# Exceptions
# =============================================================================


class ConfigError(DeclguardError):
    """Base configuration error."""

    pass


class ConfigNotFoundError(ConfigError):
    """Configuration file does not exist."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file could not be parsed into a mapping."""

    pass


class ConfigValidationError(ConfigError):
    """Configuration validation error."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Configuration validation failed: {', '.join(errors)}")


# =============================================================================
# Run Configuration
# =============================================================================


@dataclass
class RunConfig:
    """Settings for one compatibility run.

    Attributes:
        previous: Declaration file of the previous release.
        next: Declaration file of the current sources.
        out: File for the human-readable report (console if None).
        flat_out: File for the flat JSON issue list.
        ignore: Ignore-rule file.
        map_source_dir: Directory prefixed to source paths in reports.
        exclude_root_node: Leave the root name out of qualified paths.
        verbose: Show verbose trace output.
        log_level: Log level for the ``declguard`` logger.
        log_format: ``console`` or ``json`` log lines.
    """

    previous: str | None = None
    next: str | None = None
    out: str | None = None
    flat_out: str | None = None
    ignore: str | None = None
    map_source_dir: str | None = None
    exclude_root_node: bool = False
    verbose: bool = False
    log_level: str = "WARNING"
    log_format: str = "console"

    @classmethod
    def field_names(cls) -> set[str]:
        return {item.name for item in fields(cls)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunConfig":
        """Create from a mapping with any supported key style.

        Raises:
            ConfigValidationError: If unknown keys or bad values are present.
        """
        normalized = normalize_keys(data)
        known = cls.field_names()
        unknown = sorted(key for key in normalized if key not in known)
        if unknown:
            raise ConfigValidationError([f"unknown option '{key}'" for key in unknown])

        config = cls(**normalized)
        config.validate()
        return config

    def merged(self, overrides: Mapping[str, Any]) -> "RunConfig":
        """Return a copy with non-None overrides applied."""
        data = self.to_dict()
        for key, value in normalize_keys(overrides).items():
            if value is not None:
                data[key] = value
        return RunConfig.from_dict(data)

    def validate(self) -> None:
        errors: list[str] = []
        for name in ("exclude_root_node", "verbose"):
            if not isinstance(getattr(self, name), bool):
                errors.append(f"'{name}' must be a boolean")
        if self.log_format not in ("console", "json"):
            errors.append(f"'log_format' must be 'console' or 'json', got {self.log_format!r}")
        if str(self.log_level).upper() not in LOG_LEVELS:
            errors.append(f"'log_level' is not a log level: {self.log_level!r}")
        if errors:
            raise ConfigValidationError(errors)

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.field_names()}


# =============================================================================
# Key normalisation
# =============================================================================


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake_case(key: str) -> str:
    """Convert ``flatOut`` or ``flat-out`` to ``flat_out``."""
    return _CAMEL_BOUNDARY.sub("_", key).replace("-", "_").lower()


def normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {to_snake_case(str(key)): value for key, value in data.items()}


# =============================================================================
# Sources
# =============================================================================


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load a configuration file.

    Supports YAML, JSON, and TOML formats, detected from the extension.

    Raises:
        ConfigError: If the file is missing, unparseable or not a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    suffix = path.suffix.lower()

    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif suffix == ".json":
            data = json.loads(content)
        elif suffix == ".toml":
            data = tomllib.loads(content)
        else:
            raise ConfigParseError(f"Unsupported configuration format: {suffix or path.name}")
    except (yaml.YAMLError, json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigParseError(f"Failed to parse configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigParseError(f"Configuration file must contain a mapping: {path}")

    logger.debug("Loaded configuration from %s", path)
    return data


def load_env_config(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Read ``DECLGUARD_*`` environment variables.

    ``DECLGUARD_FLAT_OUT=issues.json`` becomes ``{"flat_out": "issues.json"}``.
    Boolean options accept true/false, yes/no, 1/0 and on/off.
    """
    environ = os.environ if environ is None else environ
    result: dict[str, Any] = {}
    known = RunConfig.field_names()

    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name not in known:
            continue
        result[name] = _parse_env_value(name, value)

    return result


def _parse_env_value(name: str, value: str) -> Any:
    if name in ("exclude_root_node", "verbose"):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1", "on"):
            return True
        if lowered in ("false", "no", "0", "off", ""):
            return False
        raise ConfigValidationError([f"'{name}' must be a boolean, got {value!r}"])
    return value


def load_run_config(
    config_path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> RunConfig:
    """Build the run configuration from file, environment and overrides.

    Args:
        config_path: Optional configuration file.
        overrides: Options with the highest priority; None values are skipped.
        environ: Environment to read (defaults to ``os.environ``).

    Returns:
        The merged, validated configuration.
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        data.update(normalize_keys(load_config_file(config_path)))

    data.update(load_env_config(environ))

    config = RunConfig.from_dict(data)
    if overrides:
        config = config.merged(overrides)
    return config
