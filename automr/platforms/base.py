"""
Base CI Provider - Shared HTTP plumbing for REST-backed CI providers.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

import requests
from loguru import logger

from automr.ci.exceptions import CIProviderError
from automr.ci.models import Execution, Job, JobId
from automr.platforms.models import CreateParams, Label, MergeParams, MergeRequest

PER_PAGE = 100
REQUEST_TIMEOUT = 30

T = TypeVar("T")


class BaseCIProvider(ABC):
    """
    Abstract base class for CI providers.

    Subclasses set ``name`` and implement the CI and merge request
    operations on top of :meth:`_request`.
    """

    name: str = ""

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
        assignee: Optional[str] = None,
        reviewer: Optional[str] = None,
    ):
        if not self.name:
            raise TypeError(f"{self.__class__.__name__} must define a 'name' class attribute")

        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.assignee = assignee
        self.reviewer = reviewer
        self.session = session or requests.Session()
        self.session.headers.update(self._auth_headers(token))
        if not token:
            logger.debug(f"No token configured for {self.name}, using anonymous access")

    @abstractmethod
    def _auth_headers(self, token: Optional[str]) -> Dict[str, str]:
        """Platform-specific request headers."""
        ...

    # CI executions

    @abstractmethod
    def has_executions(self, target: str) -> bool:
        ...

    @abstractmethod
    def list_executions(self, target: str) -> List[Execution]:
        ...

    @abstractmethod
    def list_jobs(self, execution_id: JobId, page: int = 1) -> Tuple[List[Job], bool]:
        ...

    # Merge requests

    @abstractmethod
    def list_labels(self) -> List[Label]:
        ...

    @abstractmethod
    def create(self, params: CreateParams) -> MergeRequest:
        """
        Open a merge request.

        Raises:
            MergeRequestExistsError: One is already open for the source branch
        """
        ...

    @abstractmethod
    def get_by_branch(self, source_branch: str, target_branch: str) -> MergeRequest:
        """
        Raises:
            MergeRequestNotFoundError: No open merge request matches
        """
        ...

    @abstractmethod
    def approve(self, mr_id: int) -> None:
        ...

    @abstractmethod
    def merge(self, params: MergeParams) -> None:
        ...

    # HTTP helpers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        operation: Optional[str] = None,
        execution_id: Optional[JobId] = None,
    ) -> requests.Response:
        """
        Send an API request.

        Raises:
            CIProviderError: On transport failure or non-2xx response
        """
        url = f"{self.api_url}{path}"
        send = getattr(self.session, method.lower())
        try:
            response = send(url, params=params or {}, json=json, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise CIProviderError(
                f"{self.name} API request failed: {e}",
                operation=operation,
                execution_id=execution_id,
            ) from e

        if not response.ok:
            raise CIProviderError(
                f"{self.name} API returned HTTP {response.status_code}: {response.text[:200]}",
                operation=operation,
                execution_id=execution_id,
                status_code=response.status_code,
            )

        logger.debug(f"{method} {path} -> {response.status_code}")
        return response

    def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
        execution_id: Optional[JobId] = None,
    ) -> requests.Response:
        return self._request(
            "GET", path, params=params, operation=operation, execution_id=execution_id
        )

    def _json(self, response: requests.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise CIProviderError(
                f"{self.name} API returned invalid JSON", operation=operation
            ) from e

    def _map(
        self,
        items: Iterable[Dict[str, Any]],
        mapper: Callable[[Dict[str, Any]], T],
        operation: str,
        execution_id: Optional[JobId] = None,
    ) -> List[T]:
        """Convert API payload items, reporting malformed ones as provider errors."""
        try:
            return [mapper(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise CIProviderError(
                f"{self.name} API returned an unexpected payload: {type(e).__name__}: {e}",
                operation=operation,
                execution_id=execution_id,
            ) from e
