"""
CI Data Models - Platform-agnostic dataclasses for the completion watcher.

GitHub Actions runs and GitLab pipelines are both represented as an
Execution; their individual checks or jobs are represented as a Job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

JobId = Union[int, str]


class JobStatus(str, Enum):
    """Tracker-level status. Platform states collapse onto these three."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"

    @classmethod
    def from_github(
        cls, status: Optional[str], conclusion: Optional[str] = None
    ) -> Tuple["JobStatus", Optional[str]]:
        """Convert GitHub Actions status/conclusion to (status, conclusion)."""
        if status == "in_progress":
            return cls.RUNNING, None
        if status == "completed":
            return cls.COMPLETED, conclusion or Conclusion.NEUTRAL.value
        # queued, waiting, pending, requested
        return cls.QUEUED, None

    @classmethod
    def from_gitlab(cls, status: Optional[str]) -> Tuple["JobStatus", Optional[str]]:
        """Convert GitLab CI status to (status, conclusion)."""
        if status == "running":
            return cls.RUNNING, None
        terminal = {
            "success": Conclusion.SUCCESS.value,
            "failed": Conclusion.FAILURE.value,
            "canceled": Conclusion.CANCELLED.value,
            "skipped": Conclusion.SKIPPED.value,
            "manual": Conclusion.NEUTRAL.value,
        }
        if status in terminal:
            return cls.COMPLETED, terminal[status]
        # created, pending, preparing, waiting_for_resource, scheduled
        return cls.QUEUED, None


class Conclusion(str, Enum):
    """Well-known terminal outcomes. Other platform values pass through as str."""

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    NEUTRAL = "neutral"
    TIMED_OUT = "timed_out"


# Conclusions that do not demote the overall result
CLEAN_CONCLUSIONS = frozenset({
    Conclusion.SUCCESS.value,
    Conclusion.SKIPPED.value,
    Conclusion.NEUTRAL.value,
})


@dataclass
class Job:
    """One unit of CI work within an execution."""

    id: Optional[JobId]
    name: str
    status: JobStatus
    conclusion: Optional[str] = None
    group: Optional[str] = None  # workflow name (GitHub) or stage (GitLab)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    url: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_running(self) -> bool:
        return self.status == JobStatus.RUNNING

    @property
    def is_completed(self) -> bool:
        return self.status == JobStatus.COMPLETED

    @property
    def state(self) -> str:
        """Conclusion when completed, otherwise the status value."""
        if self.is_completed:
            return self.conclusion or ""
        return self.status.value

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


@dataclass
class Execution:
    """One CI run (workflow run or pipeline) associated with a commit."""

    id: JobId
    status: JobStatus
    name: Optional[str] = None
    conclusion: Optional[str] = None
    ref: Optional[str] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    url: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_completed(self) -> bool:
        return self.status == JobStatus.COMPLETED


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 API timestamp ("2024-01-02T03:04:05Z") into an aware datetime."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
