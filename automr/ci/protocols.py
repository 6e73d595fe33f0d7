"""
CI Watcher Protocols - Capabilities consumed by the completion watcher.

The watcher depends on these abstractions only. Platform providers and
terminal renderers implement them structurally.
"""

from typing import Any, List, Optional, Protocol, Tuple, runtime_checkable

from automr.ci.models import Execution, Job, JobId


@runtime_checkable
class CIProviderProtocol(Protocol):
    """
    Protocol for CI providers (GitHub Actions, GitLab CI).

    Implementations raise CIProviderError on transport or API failure.
    """

    name: str

    def has_executions(self, target: str) -> bool:
        """Return True if any CI execution is or will be associated with target."""
        ...

    def list_executions(self, target: str) -> List[Execution]:
        """List executions (runs/pipelines) for a commit."""
        ...

    def list_jobs(self, execution_id: JobId, page: int = 1) -> Tuple[List[Job], bool]:
        """
        List one page of jobs for an execution.

        Args:
            execution_id: Run or pipeline identifier
            page: 1-based page number

        Returns:
            (jobs, has_more)
        """
        ...


@runtime_checkable
class StaticHandle(Protocol):
    """A plain display line bound to one job."""

    def update(self, text: str) -> None:
        ...

    def finalize_positive(self, text: str) -> None:
        ...

    def finalize_neutral(self, text: str) -> None:
        ...

    def finalize_negative(self, text: str) -> None:
        ...


@runtime_checkable
class AnimatedIndicator(Protocol):
    """A spinning display line bound to one running job."""

    def update_text(self, text: str) -> None:
        ...

    def finalize_positive(self, text: str) -> None:
        ...

    def finalize_neutral(self, text: str) -> None:
        ...

    def finalize_negative(self, text: str) -> None:
        ...

    def stop(self) -> None:
        ...


@runtime_checkable
class DisplaySink(Protocol):
    """
    Rendering capability driven by the state tracker.

    ``replacing`` names the indicator being superseded so the sink can
    swap lines in place rather than appending a new one.
    """

    def static_line(self, text: str, replacing: Optional[Any] = None) -> StaticHandle:
        ...

    def animated_indicator(self, text: str, replacing: Optional[Any] = None) -> AnimatedIndicator:
        ...

    def success(self, text: str) -> None:
        ...

    def error(self, text: str) -> None:
        ...

    def info(self, text: str) -> None:
        ...
