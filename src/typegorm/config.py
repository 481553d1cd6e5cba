"""
Configuration loading.

Settings come from, in increasing order of precedence: built-in defaults, a
YAML file, and ``TYPEGORM_*`` environment variables.

Example ``typegorm.yaml``::

    logging:
      level: debug
    models:
      - myapp.models:User
      - myapp.models:Post
"""

from __future__ import annotations

import importlib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from typegorm.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "typegorm.yaml"
ENV_PREFIX = "TYPEGORM_"
LOG_LEVELS = ("debug", "info", "warning", "error")


def default_search_paths() -> List[Path]:
    """Directories searched for ``typegorm.yaml`` when no path is given."""
    return [
        Path.cwd(),
        Path.home() / ".typegorm",
        Path("/etc/typegorm"),
    ]


@dataclass
class LoggingConfig:
    level: str = "info"

    @property
    def numeric_level(self) -> int:
        return getattr(logging, self.level.upper(), logging.INFO)


@dataclass
class TypegormConfig:
    """Top-level configuration."""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    models: List[str] = field(default_factory=list)
    source: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TypegormConfig:
        """Create from dictionary."""
        logging_data = data.get("logging") or {}
        models = data.get("models") or []
        if not isinstance(models, list):
            raise ConfigError(f"'models' must be a list, got {type(models).__name__}")
        return cls(
            logging=LoggingConfig(level=str(logging_data.get("level", "info")).lower()),
            models=[str(m) for m in models],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "logging": {"level": self.logging.level},
            "models": list(self.models),
        }

    def validate(self) -> None:
        if self.logging.level not in LOG_LEVELS:
            raise ConfigError(
                f"invalid logging level '{self.logging.level}' (expected one of {', '.join(LOG_LEVELS)})"
            )
        for reference in self.models:
            if ":" not in reference:
                raise ConfigError(f"invalid model reference '{reference}' (expected module:Class)")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"error reading config file '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file '{path}' must contain a mapping")
    return data


def _apply_env(config: TypegormConfig, environ: Mapping[str, str]) -> None:
    level = environ.get(f"{ENV_PREFIX}LOGGING_LEVEL")
    if level:
        config.logging.level = level.lower()

    models = environ.get(f"{ENV_PREFIX}MODELS")
    if models:
        config.models = [m.strip() for m in models.split(",") if m.strip()]


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TypegormConfig:
    """
    Load configuration.

    Args:
        path: Explicit config file; it must exist. When omitted the default
            search paths are tried and a missing file is not an error.
        environ: Environment mapping (default: ``os.environ``)

    Returns:
        Validated TypegormConfig

    Raises:
        ConfigError: file unreadable, malformed or invalid
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}
    source: Optional[Path] = None

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
        data = _read_yaml(path)
        source = path
    else:
        for directory in default_search_paths():
            candidate = directory / CONFIG_FILE_NAME
            if candidate.is_file():
                data = _read_yaml(candidate)
                source = candidate
                break

    if source is not None:
        logger.debug(f"Loaded config from {source}")
    else:
        logger.debug("No config file found, using defaults")

    config = TypegormConfig.from_dict(data)
    config.source = source
    _apply_env(config, environ)
    config.validate()
    return config


def import_model(reference: str) -> type:
    """
    Import a record class from a ``module:Class`` reference.

    Raises:
        ConfigError: the module or class cannot be found
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigError(f"invalid model reference '{reference}' (expected module:Class)")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"cannot import module '{module_name}': {e}") from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigError(f"'{module_name}' has no attribute '{attr_path}'") from e

    return obj
