"""
auto-mr Config - Configuration models.

Pydantic models for ~/.config/auto-mr/config.yml.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

MIN_PIPELINE_TIMEOUT = 60.0
MAX_PIPELINE_TIMEOUT = 8 * 3600.0
DEFAULT_PIPELINE_TIMEOUT = 30 * 60.0

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|ms|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}
_USERNAME = re.compile(r"^[A-Za-z0-9._-]+$")


def parse_duration(value: str) -> float:
    """
    Parse a duration like "30m", "1h30m", "45s" or "90" into seconds.

    A bare number is read as seconds.

    Raises:
        ValueError: On an empty or malformed duration
    """
    text = value.strip().lower()
    if not text:
        raise ValueError("empty duration")
    if re.fullmatch(r"\d+(?:\.\d+)?", text):
        return float(text)

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos != len(text) or pos == 0:
        raise ValueError(f"invalid duration format {value!r} (expected e.g. '30m', '1h30m')")
    return total


def validate_timeout(seconds: float, field_name: str = "pipeline_timeout") -> float:
    """Check a timeout lies within [1m, 8h]."""
    if seconds < MIN_PIPELINE_TIMEOUT:
        raise ValueError(f"{field_name} too small: minimum is 1m")
    if seconds > MAX_PIPELINE_TIMEOUT:
        raise ValueError(f"{field_name} too large: maximum is 8h")
    return seconds


class PlatformConfig(BaseModel):
    """Per-platform settings (github or gitlab section)."""

    assignee: str | None = Field(default=None, description="Username assigned to new requests")
    reviewer: str | None = Field(default=None, description="Username requested for review")
    pipeline_timeout: float | None = Field(
        default=None, description="CI wait timeout in seconds (accepts '30m', '1h30m')"
    )
    api_url: str | None = Field(default=None, description="API base URL for self-hosted instances")

    @field_validator("assignee", "reviewer", mode="before")
    @classmethod
    def _check_username(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = str(value).strip()
        if not value:
            return None
        if not _USERNAME.match(value):
            raise ValueError(f"username contains invalid characters: {value!r}")
        return value

    @field_validator("pipeline_timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: object) -> float | None:
        if value is None or value == "":
            return None
        seconds = parse_duration(value) if isinstance(value, str) else float(value)
        return validate_timeout(seconds)


class WatchConfig(BaseModel):
    """CI watch cadence."""

    poll_interval: float = Field(default=5.0, gt=0, le=300, description="Seconds between polls")
    refresh_interval: float = Field(
        default=1.0, gt=0, le=60, description="Seconds between spinner label refreshes"
    )


class AppConfig(BaseModel):
    """Complete auto-mr configuration."""

    github: PlatformConfig = Field(default_factory=PlatformConfig)
    gitlab: PlatformConfig = Field(default_factory=PlatformConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)

    def for_platform(self, platform: str) -> PlatformConfig:
        if platform == "github":
            return self.github
        if platform == "gitlab":
            return self.gitlab
        raise ValueError(f"Unknown platform: {platform}")


def resolve_pipeline_timeout(cli_value: str | None, platform: PlatformConfig) -> float:
    """
    Pick the CI wait timeout in seconds.

    Priority: command-line value, then config file, then 30 minutes.

    Raises:
        ValueError: If the command-line value is malformed or out of bounds
    """
    if cli_value:
        return validate_timeout(parse_duration(cli_value), "--timeout")
    if platform.pipeline_timeout is not None:
        return platform.pipeline_timeout
    return DEFAULT_PIPELINE_TIMEOUT
