"""
Job State Tracker - Authoritative last-known state of every CI job.

Binds each job id to at most one display indicator (a static line or an
animated spinner) and drives the display sink through the transitions
between them. One RLock guards jobs and indicators together; background
label-refresh threads take the same lock.
"""

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set, Union

from loguru import logger

from automr.ci.formatting import compose_label
from automr.ci.models import Conclusion, Job, JobId
from automr.ci.protocols import AnimatedIndicator, DisplaySink, StaticHandle

NEUTRAL_CONCLUSIONS = frozenset({Conclusion.SKIPPED.value, Conclusion.NEUTRAL.value})


class IndicatorKind(str, Enum):
    """Variant tag for an active indicator."""

    STATIC = "static"
    ANIMATED = "animated"


@dataclass
class Indicator:
    """The display primitive currently bound to a job."""

    kind: IndicatorKind
    handle: Union[StaticHandle, AnimatedIndicator]

    @property
    def is_animated(self) -> bool:
        return self.kind is IndicatorKind.ANIMATED


def finalize(
    handle: Union[StaticHandle, AnimatedIndicator], conclusion: Optional[str], label: str
) -> None:
    """Finalize a static line or spinner according to a job conclusion."""
    if conclusion == Conclusion.SUCCESS.value:
        handle.finalize_positive(label)
    elif conclusion in NEUTRAL_CONCLUSIONS:
        handle.finalize_neutral(label)
    else:
        handle.finalize_negative(label)


def _is_valid_id(job_id: Optional[JobId]) -> bool:
    return job_id is not None and job_id != 0 and job_id != ""


class StateTracker:
    """
    Tracks job state across poll cycles for one watch invocation.

    Usage:
        tracker = StateTracker(sink)
        for line in tracker.update(jobs):
            logger.debug(line)
    """

    def __init__(
        self,
        sink: DisplaySink,
        refresh_interval: float = 1.0,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            sink: Display sink receiving indicator calls
            refresh_interval: Seconds between elapsed-time refreshes of running jobs
            clock: Returns the current aware datetime (for label durations)
            sleep: Sleep function used by refresh threads
        """
        self._sink = sink
        self._refresh_interval = refresh_interval
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep
        self._lock = threading.RLock()
        self._jobs: Dict[JobId, Job] = {}
        self._indicators: Dict[JobId, Indicator] = {}

    # ------------------------------------------------------------------
    # Update cycle
    # ------------------------------------------------------------------

    def update(self, batch: Iterable[Optional[Job]]) -> List[str]:
        """
        Apply a freshly fetched job batch.

        Entries with a missing or zero id are dropped, and only the first
        occurrence of a duplicated id is processed.

        Returns:
            Human-readable transition descriptions for diagnostic logging
        """
        transitions: List[str] = []
        seen: Set[JobId] = set()

        with self._lock:
            for job in batch:
                if job is None or not _is_valid_id(job.id):
                    continue
                if job.id in seen:
                    continue
                seen.add(job.id)

                line = self._process(job)
                if line:
                    transitions.append(line)

            # Vanished jobs are reported only; their indicators stay as they are
            for job_id in self._jobs:
                if job_id not in seen:
                    transitions.append(f"{job_id} removed")

        return transitions

    def _process(self, job: Job) -> Optional[str]:
        previous = self._jobs.get(job.id)

        if previous is None:
            self._jobs[job.id] = job
            self._create_indicator(job)
            return f"{job.id} started: {job.name}"

        if previous.status != job.status or previous.conclusion != job.conclusion:
            self._jobs[job.id] = job
            self._apply_transition(previous, job)
            return f"{job.id}: {previous.state} -> {job.state}"

        self._jobs[job.id] = job
        indicator = self._indicators.get(job.id)
        if indicator is not None and not indicator.is_animated and not job.is_running:
            if job.is_completed:
                # Keep the outcome marker of a finalized line
                finalize(indicator.handle, job.conclusion, self._label(job))
            else:
                indicator.handle.update(self._label(job))
        return None

    def _create_indicator(self, job: Job) -> None:
        label = self._label(job)
        if job.is_running:
            self._start_animated(job, label)
            return

        handle = self._sink.static_line(label)
        self._indicators[job.id] = Indicator(IndicatorKind.STATIC, handle)
        if job.is_completed:
            finalize(handle, job.conclusion, label)

    def _apply_transition(self, previous: Job, job: Job) -> None:
        indicator = self._indicators.get(job.id)
        label = self._label(job)

        if job.is_completed:
            if indicator is None:
                logger.debug(f"Job {job.id} completed with no active indicator")
                return
            finalize(indicator.handle, job.conclusion, label)
            if indicator.is_animated:
                indicator.handle.stop()
                del self._indicators[job.id]
            return

        if job.is_running and not previous.is_running:
            if indicator is not None and indicator.is_animated:
                indicator.handle.update_text(label)
                return
            self._start_animated(job, label, replacing=indicator.handle if indicator else None)
            return

        if previous.is_running and not job.is_running:
            replacing = None
            if indicator is not None:
                if indicator.is_animated:
                    indicator.handle.stop()
                replacing = indicator.handle
            handle = self._sink.static_line(label, replacing=replacing)
            self._indicators[job.id] = Indicator(IndicatorKind.STATIC, handle)
            return

        self._refresh(indicator, label)

    def _refresh(self, indicator: Optional[Indicator], label: str) -> None:
        if indicator is None:
            return
        if indicator.is_animated:
            indicator.handle.update_text(label)
        else:
            indicator.handle.update(label)

    # ------------------------------------------------------------------
    # Animated indicators
    # ------------------------------------------------------------------

    def _start_animated(self, job: Job, label: str, replacing: Optional[StaticHandle] = None) -> None:
        if replacing is not None:
            # Clear the queued line before the spinner takes its place
            replacing.update("")
        spinner = self._sink.animated_indicator(label, replacing=replacing)
        self._indicators[job.id] = Indicator(IndicatorKind.ANIMATED, spinner)

        if self._refresh_interval and self._refresh_interval > 0:
            thread = threading.Thread(
                target=self._refresh_loop,
                args=(job.id, spinner),
                name=f"automr-refresh-{job.id}",
                daemon=True,
            )
            thread.start()

    def _refresh_loop(self, job_id: JobId, spinner: AnimatedIndicator) -> None:
        """Keep a running job's elapsed time current until it stops running."""
        while True:
            self._sleep(self._refresh_interval)
            with self._lock:
                job = self._jobs.get(job_id)
                indicator = self._indicators.get(job_id)
                if (
                    job is None
                    or not job.is_running
                    or indicator is None
                    or not indicator.is_animated
                    or indicator.handle is not spinner
                ):
                    return
                spinner.update_text(self._label(job))

    def _label(self, job: Job) -> str:
        return compose_label(job, self._clock())

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def jobs(self) -> Dict[JobId, Job]:
        """Snapshot of last-known jobs by id."""
        with self._lock:
            return dict(self._jobs)

    def indicator(self, job_id: JobId) -> Optional[Indicator]:
        with self._lock:
            return self._indicators.get(job_id)

    def animated_ids(self) -> Set[JobId]:
        with self._lock:
            return {jid for jid, ind in self._indicators.items() if ind.is_animated}

    def static_ids(self) -> Set[JobId]:
        with self._lock:
            return {jid for jid, ind in self._indicators.items() if not ind.is_animated}
