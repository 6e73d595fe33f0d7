"""
Centralized logging for auto-mr.

- File: always, rotated, under ~/.automr/logs (see log_config.py)
- Console: only with --verbose; the live job display owns the terminal otherwise
- Every record passes through token redaction before reaching a sink
"""
import sys
from dataclasses import replace
from typing import Any, Optional

from loguru import logger

from automr.utils.log_config import LogConfig, LogLevel, get_log_config
from automr.utils.security import redact_sensitive_info

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return redact_sensitive_info(value)
    if isinstance(value, dict):
        return {k: _redact_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_redact_value(item) for item in value)
    return value


def redaction_patcher(record) -> None:
    """Redact tokens from the message and bound extras of a log record."""
    record["message"] = redact_sensitive_info(record["message"])
    for key in list(record["extra"].keys()):
        record["extra"][key] = _redact_value(record["extra"][key])


def setup_logger(
    verbose: bool = False,
    level: Optional[str] = None,
    config: Optional[LogConfig] = None,
) -> None:
    """
    Configure loguru sinks for a CLI run.

    Args:
        verbose: Also log to stderr
        level: Console level override (--log-level)
        config: Optional LogConfig override (for testing)

    Raises:
        ValueError: Unknown level
    """
    if config is None:
        config = get_log_config()
    if level is not None:
        config = replace(config, console_level=LogLevel.from_string(level))

    logger.remove()

    config.log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        config.log_path,
        rotation=config.rotation,
        retention=config.retention,
        level=config.file_level.value,
        format=FILE_FORMAT,
        compression=config.compression,
        enqueue=True,
    )

    if verbose:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=config.console_level.value,
            colorize=True,
        )

    logger.configure(patcher=redaction_patcher)
