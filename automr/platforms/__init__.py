"""
Providers for GitHub and GitLab: CI executions and merge requests.
"""

from automr.platforms.base import BaseCIProvider
from automr.platforms.github import GitHubProvider
from automr.platforms.gitlab import GitLabProvider
from automr.platforms.models import CreateParams, Label, MergeParams, MergeRequest
from automr.platforms.registry import (
    ProviderRegistry,
    create_provider,
    detect_platform,
    get_provider_registry,
    register_builtin_providers,
)
from automr.platforms.remote import RemoteInfo, parse_remote

__all__ = [
    "BaseCIProvider",
    "CreateParams",
    "GitHubProvider",
    "GitLabProvider",
    "Label",
    "MergeParams",
    "MergeRequest",
    "ProviderRegistry",
    "RemoteInfo",
    "create_provider",
    "detect_platform",
    "get_provider_registry",
    "parse_remote",
    "register_builtin_providers",
]
