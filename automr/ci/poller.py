"""
Completion Poller - Waits for all CI executions of a commit to finish.
"""

import time
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from automr.ci.aggregation import all_completed, is_clean, overall_conclusion
from automr.ci.exceptions import CIProviderError, PipelineTimeoutError
from automr.ci.fetcher import JobFetcher
from automr.ci.formatting import format_duration
from automr.ci.models import Conclusion
from automr.ci.protocols import CIProviderProtocol, DisplaySink
from automr.ci.tracker import StateTracker

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_REFRESH_INTERVAL = 1.0


class CompletionPoller:
    """
    Polls a CI provider until every job for a target commit completes.

    Usage:
        poller = CompletionPoller(provider, sink)
        conclusion = poller.wait(sha, timeout_seconds=1800)
    """

    def __init__(
        self,
        provider: CIProviderProtocol,
        sink: DisplaySink,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.provider = provider
        self.sink = sink
        self.poll_interval = poll_interval
        self.refresh_interval = refresh_interval
        self._sleep = sleep
        self._monotonic = monotonic
        self._clock = clock
        self.fetcher = JobFetcher(provider)

    def wait(self, target: str, timeout_seconds: float) -> str:
        """
        Block until CI for target completes.

        Args:
            target: Commit SHA
            timeout_seconds: Give up after this many seconds

        Returns:
            Overall conclusion ("success" when no CI is configured)

        Raises:
            CIProviderError: Executions could not be listed
            PipelineTimeoutError: Jobs were still pending at the deadline
        """
        if not self._has_executions(target):
            logger.info(f"No CI executions for {target}, nothing to wait for")
            self.sink.info("No pipeline configured for this commit")
            return Conclusion.SUCCESS.value

        tracker = StateTracker(
            self.sink,
            refresh_interval=self.refresh_interval,
            clock=self._clock,
        )
        start = self._monotonic()

        while self._monotonic() - start < timeout_seconds:
            try:
                executions = self.provider.list_executions(target)
            except CIProviderError as e:
                logger.error(f"Failed to list pipelines for {target}: {e}")
                self.sink.error(f"Failed to list pipelines: {e}")
                raise CIProviderError(
                    f"Failed to list pipelines for {target}: {e.message}",
                    operation=e.operation or "list_executions",
                    execution_id=e.execution_id,
                    status_code=e.status_code,
                ) from e

            if not executions:
                logger.debug(f"No executions scheduled yet for {target}")
                self._sleep(self.poll_interval)
                continue

            jobs = self.fetcher.fetch(executions)
            for line in tracker.update(jobs):
                logger.debug(f"Job transition: {line}")

            if not all_completed(jobs):
                self._sleep(self.poll_interval)
                continue

            conclusion = overall_conclusion(jobs)
            total = format_duration(self._monotonic() - start)
            if is_clean(conclusion):
                self.sink.success(f"Pipeline completed successfully - total time: {total}")
            else:
                self.sink.error(f"Pipeline failed - total time: {total}")
            logger.info(f"CI for {target} finished with conclusion {conclusion!r} after {total}")
            return conclusion

        elapsed = self._monotonic() - start
        self.sink.error(f"Timeout after {format_duration(elapsed)}")
        logger.warning(f"Timed out waiting for CI on {target} after {elapsed:.1f}s")
        raise PipelineTimeoutError(elapsed, timeout_seconds)

    def _has_executions(self, target: str) -> bool:
        """Existence check; an error counts as "present" so CI is never skipped."""
        try:
            return self.provider.has_executions(target)
        except CIProviderError as e:
            logger.warning(f"Could not check for CI executions, assuming present: {e}")
            return True
