"""
Configuration loading from YAML.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from automr.ci.exceptions import ConfigError
from automr.config.models import AppConfig

CONFIG_ENV_VAR = "AUTOMR_CONFIG"


def default_config_path() -> Path:
    """~/.config/auto-mr/config.yml, or $AUTOMR_CONFIG when set."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "auto-mr" / "config.yml"


def load_config(path: Path | None = None) -> AppConfig:
    """
    Load and validate the configuration file.

    A missing file yields defaults.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, or fails validation
    """
    path = path or default_config_path()
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return AppConfig()

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {path}: {e}")
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    try:
        config = AppConfig.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid config in {path}: {e}")
        raise ConfigError(f"Invalid config in {path}: {e}") from e

    logger.debug(f"Loaded config from {path}")
    return config
