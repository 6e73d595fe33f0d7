"""
Merge Request Workflow - Open, wait for CI, approve and merge.
"""

import time
from typing import Callable, Optional

from loguru import logger

from automr.ci.aggregation import is_clean
from automr.ci.exceptions import (
    CIProviderError,
    MergeRequestExistsError,
    PipelineFailedError,
)
from automr.ci.poller import CompletionPoller
from automr.platforms.base import BaseCIProvider
from automr.platforms.models import CreateParams, MergeParams, MergeRequest

PIPELINE_STARTUP_DELAY = 2.0


class MergeRequestWorkflow:
    """
    Drives one merge request from creation to merge.

    Usage:
        workflow = MergeRequestWorkflow(provider)
        mr = workflow.open(params)
        workflow.wait(mr, poller, timeout_seconds=1800)
        workflow.merge(mr, commit_title=params.title)
    """

    def __init__(
        self,
        provider: BaseCIProvider,
        sleep: Callable[[float], None] = time.sleep,
        startup_delay: float = PIPELINE_STARTUP_DELAY,
    ):
        self.provider = provider
        self._sleep = sleep
        self.startup_delay = startup_delay

    def open(self, params: CreateParams) -> MergeRequest:
        """Create a merge request, or reuse the open one for the same branches."""
        try:
            return self.provider.create(params)
        except MergeRequestExistsError:
            logger.warning(f"Merge request already exists for branch {params.source_branch}")
            mr = self.provider.get_by_branch(params.source_branch, params.target_branch)
            logger.info(f"Using existing merge request: {mr.web_url}")
            return mr

    def wait(
        self,
        mr: MergeRequest,
        poller: CompletionPoller,
        timeout_seconds: float,
        fallback_sha: Optional[str] = None,
    ) -> str:
        """
        Wait for CI on the merge request head commit.

        Raises:
            PipelineFailedError: CI finished with a non-clean conclusion
            PipelineTimeoutError: CI did not finish in time
            CIProviderError: Executions could not be listed
        """
        target = mr.sha or fallback_sha
        if not target:
            raise CIProviderError(
                f"Merge request {mr.id} has no head commit to watch", operation="wait"
            )

        # Give the platform time to register pipelines for the new head
        self._sleep(self.startup_delay)
        conclusion = poller.wait(target, timeout_seconds)
        if not is_clean(conclusion):
            raise PipelineFailedError(conclusion)
        return conclusion

    def merge(self, mr: MergeRequest, commit_title: str, squash: bool = True) -> None:
        """Approve (best effort), then merge."""
        try:
            self.provider.approve(mr.id)
        except CIProviderError as e:
            logger.warning(f"Failed to approve merge request {mr.id}: {e}")

        self.provider.merge(
            MergeParams(
                mr_id=mr.id,
                source_branch=mr.source_branch,
                commit_title=commit_title,
                squash=squash,
            )
        )
        logger.info(f"Merge request {mr.id} merged")
