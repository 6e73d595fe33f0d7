"""
Logging configuration for auto-mr.

Everything goes to a rotated file under ~/.automr/logs; the console only
gets log records with --verbose. AUTOMR_LOG_* variables override defaults.
"""
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple


class LogLevel(str, Enum):
    """Levels accepted by --log-level and AUTOMR_LOG_*LEVEL."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @classmethod
    def from_string(cls, level: str) -> "LogLevel":
        """Parse a level name, case-insensitive; "warn" is accepted."""
        name = level.strip().upper()
        if name == "WARN":
            return cls.WARNING
        try:
            return cls(name)
        except ValueError:
            choices = ", ".join(member.value.lower() for member in cls)
            raise ValueError(f"Unknown log level {level!r} (expected one of: {choices})") from None


def parse_compression(value: str) -> Optional[str]:
    """Rotated file compression: gz, zip, or none."""
    value = value.strip().lower()
    if value in ("", "none"):
        return None
    if value not in ("gz", "zip"):
        raise ValueError(f"Unsupported compression {value!r} (expected gz, zip or none)")
    return value


@dataclass(frozen=True)
class LogConfig:
    """File and console logging settings for one CLI run."""
    log_dir: Path = field(default_factory=lambda: Path.home() / ".automr" / "logs")
    file_name: str = "automr.log"
    file_level: LogLevel = LogLevel.DEBUG
    console_level: LogLevel = LogLevel.INFO
    rotation: str = "10 MB"
    retention: str = "1 week"
    compression: Optional[str] = "gz"

    @property
    def log_path(self) -> Path:
        return self.log_dir / self.file_name


# Environment variable -> (LogConfig field, parser)
ENV_OVERRIDES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "AUTOMR_LOG_DIR": ("log_dir", lambda value: Path(value).expanduser()),
    "AUTOMR_LOG_LEVEL": ("file_level", LogLevel.from_string),
    "AUTOMR_LOG_CONSOLE_LEVEL": ("console_level", LogLevel.from_string),
    "AUTOMR_LOG_ROTATION": ("rotation", str.strip),
    "AUTOMR_LOG_RETENTION": ("retention", str.strip),
    "AUTOMR_LOG_COMPRESSION": ("compression", parse_compression),
}


def load_log_config(environ: Optional[Mapping[str, str]] = None) -> LogConfig:
    """
    Build logging configuration from defaults and AUTOMR_LOG_* variables.

    Raises:
        ValueError: A variable holds an invalid value (the message names it)
    """
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    for variable, (name, parse) in ENV_OVERRIDES.items():
        if variable not in environ:
            continue
        try:
            overrides[name] = parse(environ[variable])
        except ValueError as e:
            raise ValueError(f"{variable}: {e}") from e
    return replace(LogConfig(), **overrides)


def get_log_config() -> LogConfig:
    """Get the current logging configuration (cached)."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_log_config()
    return _cached_config


def reset_log_config() -> None:
    """Reset the cached configuration."""
    global _cached_config
    _cached_config = None


_cached_config: Optional[LogConfig] = None
