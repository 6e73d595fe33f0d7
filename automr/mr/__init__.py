"""
Merge request creation, label selection and merging.
"""

from automr.mr.labels import (
    MAX_LABELS,
    auto_select_labels,
    extract_commit_type,
    parse_labels,
    select_labels,
    validate_labels,
)
from automr.mr.workflow import MergeRequestWorkflow

__all__ = [
    "MAX_LABELS",
    "MergeRequestWorkflow",
    "auto_select_labels",
    "extract_commit_type",
    "parse_labels",
    "select_labels",
    "validate_labels",
]
