"""
auto-mr Config - YAML configuration with pydantic validation.
"""

from automr.config.loader import default_config_path, load_config
from automr.config.models import (
    DEFAULT_PIPELINE_TIMEOUT,
    AppConfig,
    PlatformConfig,
    WatchConfig,
    parse_duration,
    resolve_pipeline_timeout,
)

__all__ = [
    "DEFAULT_PIPELINE_TIMEOUT",
    "AppConfig",
    "PlatformConfig",
    "WatchConfig",
    "default_config_path",
    "load_config",
    "parse_duration",
    "resolve_pipeline_timeout",
]
