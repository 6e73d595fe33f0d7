"""
Conclusion aggregation over a fetched job batch.
"""
from typing import Iterable

from automr.ci.models import CLEAN_CONCLUSIONS, Conclusion, Job, JobStatus


def all_completed(jobs: Iterable[Job]) -> bool:
    """False while any job is queued or running."""
    return not any(
        job.status in (JobStatus.QUEUED, JobStatus.RUNNING) for job in jobs
    )


def overall_conclusion(jobs: Iterable[Job]) -> str:
    """
    Reduce job conclusions to one result.

    The first job (batch order) whose conclusion is not success, skipped
    or neutral decides the result; later failures do not override it.
    A batch of [failure, cancelled] therefore yields "failure", and
    [cancelled, failure] yields "cancelled".
    """
    for job in jobs:
        if job.conclusion not in CLEAN_CONCLUSIONS:
            return job.conclusion or ""
    return Conclusion.SUCCESS.value


def is_clean(conclusion: str) -> bool:
    return conclusion in CLEAN_CONCLUSIONS
