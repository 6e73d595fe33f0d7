"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from automr.ci.exceptions import CIProviderError
from automr.ci.models import Execution, Job, JobStatus

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_job(
    job_id=1,
    name: str = "build",
    status: JobStatus = JobStatus.QUEUED,
    conclusion: Optional[str] = None,
    group: Optional[str] = None,
    started_after: Optional[int] = None,
    completed_after: Optional[int] = None,
) -> Job:
    """Build a Job with timestamps expressed as seconds after T0."""
    return Job(
        id=job_id,
        name=name,
        status=status,
        conclusion=conclusion,
        group=group,
        started_at=T0 + timedelta(seconds=started_after) if started_after is not None else None,
        completed_at=T0 + timedelta(seconds=completed_after) if completed_after is not None else None,
    )


def completed(job_id, conclusion: str = "success", name: str = "build") -> Job:
    return make_job(job_id, name=name, status=JobStatus.COMPLETED, conclusion=conclusion)


def running(job_id, name: str = "build", started_after: Optional[int] = 0) -> Job:
    return make_job(job_id, name=name, status=JobStatus.RUNNING, started_after=started_after)


def make_execution(
    execution_id=100,
    status: JobStatus = JobStatus.RUNNING,
    conclusion: Optional[str] = None,
    name: Optional[str] = None,
    ref: Optional[str] = "main",
) -> Execution:
    return Execution(
        id=execution_id,
        name=name,
        status=status,
        conclusion=conclusion,
        ref=ref,
        created_at=T0,
        updated_at=T0 + timedelta(seconds=90),
    )


class FakeProvider:
    """Scripted CI provider.

    ``jobs`` maps execution id to a list of pages; an exception instance in
    place of a page is raised when that page is requested.
    """

    name = "fake"

    def __init__(
        self,
        executions: Optional[List[Execution]] = None,
        jobs: Optional[Dict[object, list]] = None,
        present: bool = True,
    ):
        self.executions = executions or []
        self.jobs = jobs or {}
        self.present = present
        self.list_jobs_calls: List[Tuple[object, int]] = []

    def has_executions(self, target: str) -> bool:
        if isinstance(self.present, Exception):
            raise self.present
        return self.present

    def list_executions(self, target: str) -> List[Execution]:
        if isinstance(self.executions, Exception):
            raise self.executions
        return list(self.executions)

    def list_jobs(self, execution_id, page: int = 1):
        self.list_jobs_calls.append((execution_id, page))
        pages = self.jobs.get(execution_id, [[]])
        current = pages[page - 1]
        if isinstance(current, Exception):
            raise current
        return list(current), page < len(pages)


@pytest.fixture
def sink() -> MagicMock:
    """Display sink returning a fresh mock handle per line."""
    mock = MagicMock()
    mock.static_line.side_effect = lambda text, replacing=None: MagicMock(name=f"static:{text}")
    mock.animated_indicator.side_effect = lambda text, replacing=None: MagicMock(name=f"spinner:{text}")
    return mock


@pytest.fixture
def clock():
    """Fixed clock five minutes after T0."""
    return lambda: T0 + timedelta(minutes=5)


@pytest.fixture
def provider_error() -> CIProviderError:
    return CIProviderError("boom", operation="list_jobs")
