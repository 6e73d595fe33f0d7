"""
CI Completion Watcher.

Polls a CI provider for the executions attached to a commit, tracks every
job's state and drives a live display until all jobs complete.
"""

from automr.ci.aggregation import all_completed, overall_conclusion
from automr.ci.exceptions import (
    AutoMRError,
    CIProviderError,
    ConfigError,
    LabelError,
    MergeRequestExistsError,
    MergeRequestNotFoundError,
    PipelineFailedError,
    PipelineTimeoutError,
)
from automr.ci.fetcher import JobFetcher, pseudo_job
from automr.ci.formatting import compose_label, format_duration
from automr.ci.models import Conclusion, Execution, Job, JobStatus
from automr.ci.poller import CompletionPoller
from automr.ci.protocols import (
    AnimatedIndicator,
    CIProviderProtocol,
    DisplaySink,
    StaticHandle,
)
from automr.ci.tracker import Indicator, IndicatorKind, StateTracker

__all__ = [
    "AnimatedIndicator",
    "AutoMRError",
    "CIProviderError",
    "CIProviderProtocol",
    "CompletionPoller",
    "Conclusion",
    "ConfigError",
    "DisplaySink",
    "Execution",
    "Indicator",
    "IndicatorKind",
    "Job",
    "JobFetcher",
    "JobStatus",
    "LabelError",
    "MergeRequestExistsError",
    "MergeRequestNotFoundError",
    "PipelineFailedError",
    "PipelineTimeoutError",
    "StateTracker",
    "StaticHandle",
    "all_completed",
    "compose_label",
    "format_duration",
    "overall_conclusion",
    "pseudo_job",
]
