"""
GitHub Actions provider.

Workflow runs for a commit are executions; their workflow jobs are jobs.
Merge requests are pull requests.
"""

from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from automr.ci.exceptions import (
    CIProviderError,
    MergeRequestExistsError,
    MergeRequestNotFoundError,
)
from automr.ci.models import Execution, Job, JobId, JobStatus, parse_timestamp
from automr.platforms.base import PER_PAGE, BaseCIProvider
from automr.platforms.models import CreateParams, Label, MergeParams, MergeRequest

GITHUB_API_URL = "https://api.github.com"


def merge_method(squash: bool) -> str:
    return "squash" if squash else "merge"


class GitHubProvider(BaseCIProvider):
    """GitHub Actions workflow runs and jobs, and pull requests."""

    name = "github"

    def __init__(self, owner: str, repo: str, api_url: Optional[str] = None, **kwargs):
        super().__init__(api_url or GITHUB_API_URL, **kwargs)
        self.owner = owner
        self.repo = repo

    def _auth_headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    # ------------------------------------------------------------------
    # CI executions
    # ------------------------------------------------------------------

    def has_executions(self, target: str) -> bool:
        """Workflow runs, or check suites which exist before runs start."""
        runs = self._workflow_runs(target)
        if runs:
            logger.debug(f"Found {len(runs)} workflow run(s) for {target}")
            return True

        response = self._get(
            f"{self._repo_path}/commits/{target}/check-suites",
            operation="list_check_suites",
        )
        total = self._json(response, "list_check_suites").get("total_count", 0)
        logger.debug(f"Found {total} check suite(s) for {target}")
        return total > 0

    def list_executions(self, target: str) -> List[Execution]:
        return self._map(self._workflow_runs(target), self._to_execution, "list_executions")

    def list_jobs(self, execution_id: JobId, page: int = 1) -> Tuple[List[Job], bool]:
        response = self._get(
            f"{self._repo_path}/actions/runs/{execution_id}/jobs",
            params={"page": page, "per_page": PER_PAGE},
            operation="list_jobs",
            execution_id=execution_id,
        )
        data = self._json(response, "list_jobs")
        jobs = self._map(data.get("jobs", []), self._to_job, "list_jobs", execution_id)
        return jobs, "next" in response.links

    def _workflow_runs(self, target: str) -> List[Dict[str, Any]]:
        response = self._get(
            f"{self._repo_path}/actions/runs",
            params={"head_sha": target, "per_page": PER_PAGE},
            operation="list_executions",
        )
        return self._json(response, "list_executions").get("workflow_runs", [])

    @staticmethod
    def _to_execution(run: Dict[str, Any]) -> Execution:
        status, conclusion = JobStatus.from_github(run.get("status"), run.get("conclusion"))
        return Execution(
            id=run["id"],
            name=run.get("name"),
            status=status,
            conclusion=conclusion,
            ref=run.get("head_branch"),
            created_at=parse_timestamp(run.get("created_at")),
            started_at=parse_timestamp(run.get("run_started_at")),
            updated_at=parse_timestamp(run.get("updated_at")),
            url=run.get("html_url"),
            raw_data=run,
        )

    @staticmethod
    def _to_job(item: Dict[str, Any]) -> Job:
        status, conclusion = JobStatus.from_github(item.get("status"), item.get("conclusion"))
        return Job(
            id=item.get("id"),
            name=item.get("name", ""),
            status=status,
            conclusion=conclusion,
            group=item.get("workflow_name"),
            started_at=parse_timestamp(item.get("started_at")),
            completed_at=parse_timestamp(item.get("completed_at")),
            url=item.get("html_url"),
            raw_data=item,
        )

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    def list_labels(self) -> List[Label]:
        labels: List[Label] = []
        page = 1
        while True:
            response = self._get(
                f"{self._repo_path}/labels",
                params={"page": page, "per_page": PER_PAGE},
                operation="list_labels",
            )
            labels.extend(self._map(self._json(response, "list_labels"), self._to_label, "list_labels"))
            if "next" not in response.links:
                break
            page += 1
        logger.debug(f"Retrieved {len(labels)} label(s) for {self.owner}/{self.repo}")
        return labels

    def create(self, params: CreateParams) -> MergeRequest:
        """
        Open a pull request, then add assignee, reviewer and labels.

        The reviewer is skipped when it is the pull request author, since
        GitHub rejects self-review requests.
        """
        logger.debug(f"Creating pull request {params.source_branch} -> {params.target_branch}")
        try:
            response = self._request(
                "POST",
                f"{self._repo_path}/pulls",
                json={
                    "title": params.title,
                    "head": params.source_branch,
                    "base": params.target_branch,
                    "body": params.body,
                },
                operation="create_pull_request",
            )
        except CIProviderError as e:
            if e.status_code == 422 and "already exists" in e.message:
                raise MergeRequestExistsError(
                    f"A pull request already exists for {params.source_branch}",
                    operation="create_pull_request",
                    status_code=e.status_code,
                ) from e
            raise

        pr = self._json(response, "create_pull_request")
        mr = self._map([pr], self._to_merge_request, "create_pull_request")[0]
        issue_path = f"{self._repo_path}/issues/{mr.id}"

        if self.assignee:
            self._request(
                "POST",
                f"{issue_path}/assignees",
                json={"assignees": [self.assignee]},
                operation="add_assignees",
            )

        author = (pr.get("user") or {}).get("login")
        if self.reviewer and self.reviewer != author:
            self._request(
                "POST",
                f"{self._repo_path}/pulls/{mr.id}/requested_reviewers",
                json={"reviewers": [self.reviewer]},
                operation="request_reviewers",
            )

        if params.labels:
            self._request(
                "POST",
                f"{issue_path}/labels",
                json={"labels": list(params.labels)},
                operation="add_labels",
            )

        logger.info(f"Pull request #{mr.id} created: {mr.web_url}")
        return mr

    def get_by_branch(self, source_branch: str, target_branch: str) -> MergeRequest:
        response = self._get(
            f"{self._repo_path}/pulls",
            params={"state": "open", "head": f"{self.owner}:{source_branch}", "base": target_branch},
            operation="get_pull_request",
        )
        prs = self._json(response, "get_pull_request")
        if not prs:
            raise MergeRequestNotFoundError(
                f"No open pull request for {source_branch} -> {target_branch}",
                operation="get_pull_request",
            )
        return self._map(prs[:1], self._to_merge_request, "get_pull_request")[0]

    def approve(self, mr_id: int) -> None:
        # Authors cannot approve their own pull requests on GitHub
        logger.debug(f"Skipping approval of pull request #{mr_id} on GitHub")

    def merge(self, params: MergeParams) -> None:
        """Merge the pull request, then delete its source branch."""
        method = merge_method(params.squash)
        logger.debug(f"Merging pull request #{params.mr_id} using {method}")
        self._request(
            "PUT",
            f"{self._repo_path}/pulls/{params.mr_id}/merge",
            json={"merge_method": method, "commit_title": params.commit_title},
            operation="merge_pull_request",
        )

        try:
            self._request(
                "DELETE",
                f"{self._repo_path}/git/refs/heads/{params.source_branch}",
                operation="delete_branch",
            )
        except CIProviderError as e:
            logger.warning(f"Failed to delete remote branch {params.source_branch}: {e}")

    @staticmethod
    def _to_label(item: Dict[str, Any]) -> Label:
        return Label(name=item["name"], color=item.get("color"), description=item.get("description"))

    @staticmethod
    def _to_merge_request(pr: Dict[str, Any]) -> MergeRequest:
        head = pr.get("head") or {}
        return MergeRequest(
            id=pr["number"],
            web_url=pr.get("html_url", ""),
            source_branch=head.get("ref", ""),
            target_branch=(pr.get("base") or {}).get("ref"),
            sha=head.get("sha"),
            title=pr.get("title"),
            raw_data=pr,
        )
