"""
Merge request data models shared by GitHub and GitLab providers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Label:
    """A repository label."""

    name: str
    color: Optional[str] = None
    description: Optional[str] = None


@dataclass
class MergeRequest:
    """
    A merge request (GitLab) or pull request (GitHub).

    ``id`` is the project-scoped number: the PR number on GitHub, the
    MR iid on GitLab.
    """

    id: int
    web_url: str
    source_branch: str
    target_branch: Optional[str] = None
    sha: Optional[str] = None
    title: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


@dataclass
class CreateParams:
    """Parameters for opening a merge request."""

    source_branch: str
    target_branch: str
    title: str
    body: str = ""
    labels: List[str] = field(default_factory=list)
    squash: bool = True


@dataclass
class MergeParams:
    """Parameters for merging a merge request."""

    mr_id: int
    source_branch: str
    commit_title: str
    squash: bool = True
