"""
Exceptions raised by the CI watcher and its providers.
"""

from typing import Optional

from automr.ci.models import JobId


class AutoMRError(Exception):
    """Base exception for auto-mr."""


class CIProviderError(AutoMRError):
    """Exception raised when a CI provider operation fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        execution_id: Optional[JobId] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.execution_id = execution_id
        self.status_code = status_code

    def __str__(self) -> str:
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.execution_id is not None:
            context.append(f"execution={self.execution_id}")
        if self.status_code is not None:
            context.append(f"http={self.status_code}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class PipelineTimeoutError(AutoMRError):
    """The watch deadline passed before every job completed."""

    def __init__(self, elapsed: float, timeout: float):
        super().__init__(f"Pipeline did not complete within {timeout:.0f}s (waited {elapsed:.0f}s)")
        self.elapsed = elapsed
        self.timeout = timeout


class ConfigError(AutoMRError):
    """Configuration file is unreadable or invalid."""


class MergeRequestExistsError(CIProviderError):
    """An open merge/pull request already exists for the source branch."""


class MergeRequestNotFoundError(CIProviderError):
    """No open merge/pull request matches the requested branches."""


class LabelError(AutoMRError):
    """Requested labels are invalid for the repository."""


class PipelineFailedError(AutoMRError):
    """CI finished with a conclusion that blocks merging."""

    def __init__(self, conclusion: str):
        super().__init__(f"Pipeline failed with status: {conclusion or 'unknown'}")
        self.conclusion = conclusion
