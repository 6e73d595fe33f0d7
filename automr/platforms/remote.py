"""
Git remote URL parsing.

Handles the three remote forms git produces:
- HTTPS: https://github.com/owner/repo.git
- SSH colon: git@github.com:owner/repo.git
- SSH protocol: ssh://git@github.com/owner/repo.git
"""
from dataclasses import dataclass
from urllib.parse import urlparse


@dataclass(frozen=True)
class RemoteInfo:
    """Host and repository path of a git remote."""

    host: str
    path: str  # "owner/repo" or "group/subgroup/project"

    @property
    def owner(self) -> str:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""

    @property
    def repo(self) -> str:
        return self.path.rsplit("/", 1)[-1]


def parse_remote(url: str) -> RemoteInfo:
    """
    Parse a git remote URL into host and repository path.

    Raises:
        ValueError: If the URL has no host or fewer than two path components
    """
    url = url.strip()
    if not url:
        raise ValueError("Empty remote URL")

    if "://" in url:
        parsed = urlparse(url)
        host = parsed.hostname or ""
        path = parsed.path
    elif "@" in url and ":" in url:
        # git@host:owner/repo
        user_host, _, path = url.partition(":")
        host = user_host.split("@", 1)[1]
    else:
        raise ValueError(f"Unrecognized remote URL: {url!r}")

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]

    if not host or path.count("/") < 1:
        raise ValueError(f"Remote URL has no owner/repository path: {url!r}")

    return RemoteInfo(host=host.lower(), path=path)
