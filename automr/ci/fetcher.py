"""
Job Fetcher - Concurrent per-execution job retrieval.

Each execution's jobs are fetched in their own worker. An execution whose
jobs cannot be listed is shown as a single pseudo-job so it never drops
off the display.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from loguru import logger

from automr.ci.exceptions import CIProviderError
from automr.ci.models import Execution, Job, JobStatus
from automr.ci.protocols import CIProviderProtocol


def pseudo_job(execution: Execution) -> Job:
    """Represent a whole execution as one job."""
    started = execution.started_at or execution.created_at
    completed = execution.updated_at if execution.status == JobStatus.COMPLETED else None
    return Job(
        id=execution.id,
        name=execution.name or f"Pipeline #{execution.id}",
        status=execution.status,
        conclusion=execution.conclusion,
        group=execution.ref,
        started_at=started,
        completed_at=completed,
        url=execution.url,
    )


class JobFetcher:
    """Fetch the current job batch for a set of executions."""

    def __init__(self, provider: CIProviderProtocol):
        self.provider = provider

    def fetch(self, executions: List[Execution]) -> List[Job]:
        """
        Fetch jobs for every execution concurrently.

        Results keep execution order. If no execution yields real jobs,
        every execution is returned as a pseudo-job instead.
        """
        if not executions:
            return []

        with ThreadPoolExecutor(
            max_workers=len(executions), thread_name_prefix="automr-fetch"
        ) as pool:
            results = list(pool.map(self._fetch_execution, executions))

        jobs: List[Job] = []
        real_jobs = 0
        for execution, fetched in zip(executions, results):
            if fetched is None:
                jobs.append(pseudo_job(execution))
                continue
            jobs.extend(fetched)
            real_jobs += len(fetched)

        if real_jobs == 0:
            logger.debug(f"No job details yet for {len(executions)} execution(s), using pseudo-jobs")
            return [pseudo_job(execution) for execution in executions]

        return jobs

    def _fetch_execution(self, execution: Execution) -> Optional[List[Job]]:
        """All pages of jobs for one execution, or None if listing failed."""
        jobs: List[Job] = []
        page = 1
        try:
            while True:
                batch, has_more = self.provider.list_jobs(execution.id, page)
                jobs.extend(batch)
                if not has_more:
                    break
                page += 1
        except CIProviderError as e:
            logger.warning(f"Could not list jobs for execution {execution.id}: {e}")
            return None
        except Exception as e:
            logger.warning(
                f"Unexpected error listing jobs for execution {execution.id}: {type(e).__name__}: {e}"
            )
            return None
        return jobs
