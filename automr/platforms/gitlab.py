"""
GitLab CI provider.

Pipelines for a commit are executions; pipeline jobs are jobs.
"""

from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

from loguru import logger

from automr.ci.exceptions import (
    CIProviderError,
    MergeRequestExistsError,
    MergeRequestNotFoundError,
)
from automr.ci.models import Execution, Job, JobId, JobStatus, parse_timestamp
from automr.platforms.base import PER_PAGE, BaseCIProvider
from automr.platforms.models import CreateParams, Label, MergeParams, MergeRequest

GITLAB_API_URL = "https://gitlab.com/api/v4"


class GitLabProvider(BaseCIProvider):
    """GitLab CI pipelines and jobs, and merge requests."""

    name = "gitlab"

    def __init__(self, project_path: str, api_url: Optional[str] = None, **kwargs):
        super().__init__(api_url or GITLAB_API_URL, **kwargs)
        self.project_path = project_path

    def _auth_headers(self, token: Optional[str]) -> Dict[str, str]:
        return {"PRIVATE-TOKEN": token} if token else {}

    @property
    def _project(self) -> str:
        return f"/projects/{quote(self.project_path, safe='')}"

    def has_executions(self, target: str) -> bool:
        return bool(self._pipelines(target))

    def list_executions(self, target: str) -> List[Execution]:
        return self._map(self._pipelines(target), self._to_execution, "list_executions")

    def list_jobs(self, execution_id: JobId, page: int = 1) -> Tuple[List[Job], bool]:
        response = self._get(
            f"{self._project}/pipelines/{execution_id}/jobs",
            params={"page": page, "per_page": PER_PAGE},
            operation="list_jobs",
            execution_id=execution_id,
        )
        jobs = self._map(self._json(response, "list_jobs"), self._to_job, "list_jobs", execution_id)
        return jobs, bool(response.headers.get("X-Next-Page"))

    def _pipelines(self, target: str) -> List[Dict[str, Any]]:
        response = self._get(
            f"{self._project}/pipelines",
            params={"sha": target, "per_page": PER_PAGE},
            operation="list_executions",
        )
        return self._json(response, "list_executions")

    @staticmethod
    def _to_execution(pipeline: Dict[str, Any]) -> Execution:
        status, conclusion = JobStatus.from_gitlab(pipeline.get("status"))
        return Execution(
            id=pipeline["id"],
            name=f"Pipeline #{pipeline['id']}",
            status=status,
            conclusion=conclusion,
            ref=pipeline.get("ref"),
            created_at=parse_timestamp(pipeline.get("created_at")),
            started_at=parse_timestamp(pipeline.get("started_at")),
            updated_at=parse_timestamp(pipeline.get("updated_at")),
            url=pipeline.get("web_url"),
            raw_data=pipeline,
        )

    @staticmethod
    def _to_job(item: Dict[str, Any]) -> Job:
        status, conclusion = JobStatus.from_gitlab(item.get("status"))
        return Job(
            id=item.get("id"),
            name=item.get("name", ""),
            status=status,
            conclusion=conclusion,
            group=item.get("stage"),
            started_at=parse_timestamp(item.get("started_at")),
            completed_at=parse_timestamp(item.get("finished_at")),
            url=item.get("web_url"),
            raw_data=item,
        )

    # Merge requests

    def list_labels(self) -> List[Label]:
        labels: List[Label] = []
        page = 1
        while True:
            response = self._get(
                f"{self._project}/labels",
                params={"page": page, "per_page": PER_PAGE},
                operation="list_labels",
            )
            labels.extend(self._map(self._json(response, "list_labels"), self._to_label, "list_labels"))
            if not response.headers.get("X-Next-Page"):
                break
            page += 1
        logger.debug(f"Retrieved {len(labels)} label(s) for {self.project_path}")
        return labels

    def create(self, params: CreateParams) -> MergeRequest:
        logger.debug(f"Creating merge request {params.source_branch} -> {params.target_branch}")
        payload: Dict[str, Any] = {
            "source_branch": params.source_branch,
            "target_branch": params.target_branch,
            "title": params.title,
            "description": params.body,
            "squash": params.squash,
            "remove_source_branch": True,
        }
        if self.assignee:
            payload["assignee_id"] = self._user_id(self.assignee)
        if self.reviewer:
            payload["reviewer_ids"] = [self._user_id(self.reviewer)]
        if params.labels:
            payload["labels"] = ",".join(params.labels)

        try:
            response = self._request(
                "POST",
                f"{self._project}/merge_requests",
                json=payload,
                operation="create_merge_request",
            )
        except CIProviderError as e:
            if e.status_code == 409:
                raise MergeRequestExistsError(
                    f"A merge request already exists for {params.source_branch}",
                    operation="create_merge_request",
                    status_code=e.status_code,
                ) from e
            raise

        mr = self._map(
            [self._json(response, "create_merge_request")],
            self._to_merge_request,
            "create_merge_request",
        )[0]
        logger.info(f"Merge request !{mr.id} created: {mr.web_url}")
        return mr

    def get_by_branch(self, source_branch: str, target_branch: str) -> MergeRequest:
        response = self._get(
            f"{self._project}/merge_requests",
            params={
                "state": "opened",
                "source_branch": source_branch,
                "target_branch": target_branch,
            },
            operation="get_merge_request",
        )
        mrs = self._json(response, "get_merge_request")
        if not mrs:
            raise MergeRequestNotFoundError(
                f"No open merge request for {source_branch} -> {target_branch}",
                operation="get_merge_request",
            )
        return self._map(mrs[:1], self._to_merge_request, "get_merge_request")[0]

    def approve(self, mr_id: int) -> None:
        self._request(
            "POST",
            f"{self._project}/merge_requests/{mr_id}/approve",
            operation="approve_merge_request",
        )
        logger.debug(f"Merge request !{mr_id} approved")

    def merge(self, params: MergeParams) -> None:
        payload: Dict[str, Any] = {
            "squash": params.squash,
            "should_remove_source_branch": True,
        }
        if params.squash:
            payload["squash_commit_message"] = params.commit_title
        else:
            payload["merge_commit_message"] = params.commit_title

        logger.debug(f"Merging merge request !{params.mr_id}")
        self._request(
            "PUT",
            f"{self._project}/merge_requests/{params.mr_id}/merge",
            json=payload,
            operation="merge_merge_request",
        )

    def _user_id(self, username: str) -> int:
        response = self._get("/users", params={"username": username}, operation="find_user")
        users = self._json(response, "find_user")
        if not users:
            raise CIProviderError(f"GitLab user not found: {username}", operation="find_user")
        return self._map(users[:1], lambda user: user["id"], "find_user")[0]

    @staticmethod
    def _to_label(item: Dict[str, Any]) -> Label:
        return Label(name=item["name"], color=item.get("color"), description=item.get("description"))

    @staticmethod
    def _to_merge_request(mr: Dict[str, Any]) -> MergeRequest:
        return MergeRequest(
            id=mr["iid"],
            web_url=mr.get("web_url", ""),
            source_branch=mr.get("source_branch", ""),
            target_branch=mr.get("target_branch"),
            sha=mr.get("sha"),
            title=mr.get("title"),
            raw_data=mr,
        )
