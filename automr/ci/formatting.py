"""
Label and duration formatting for job indicators and summary lines.
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from automr.ci.models import Job


def format_duration(value: Union[float, int, timedelta]) -> str:
    """
    Format a duration as "{m}m {s}s", or "{s}s" under one minute.

    Rounds to the nearest second. Hours fold into the minute count,
    so 8130 seconds renders as "135m 30s".
    """
    if isinstance(value, timedelta):
        value = value.total_seconds()
    total = max(0, math.floor(value + 0.5))
    minutes, seconds = divmod(total, 60)
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def status_word(job: Job) -> str:
    if job.is_completed:
        return job.conclusion or "completed"
    return "running" if job.is_running else "queued"


def job_elapsed(job: Job, now: Optional[datetime] = None) -> Optional[timedelta]:
    """Finished duration if known, else elapsed-so-far for a running job."""
    if job.started_at and job.completed_at:
        return job.completed_at - job.started_at
    if job.is_running and job.started_at:
        now = now or datetime.now(timezone.utc)
        return now - job.started_at
    return None


def compose_label(job: Job, now: Optional[datetime] = None) -> str:
    """Build "group/name (status[, duration])" for a job indicator."""
    name = f"{job.group}/{job.name}" if job.group else job.name
    elapsed = job_elapsed(job, now)
    if elapsed is None:
        return f"{name} ({status_word(job)})"
    return f"{name} ({status_word(job)}, {format_duration(elapsed)})"
