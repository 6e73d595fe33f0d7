"""
auto-mr - Merge request automation for GitHub and GitLab.

Watches CI executions for a commit until they finish and reports
the overall conclusion.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("auto-mr")
except PackageNotFoundError:
    # Package not installed, fallback to pyproject.toml
    __version__ = "0.4.0"

__author__ = "auto-mr Contributors"
