"""
Label selection for merge requests.

Labels are either given explicitly (validated against the repository) or
picked automatically from the conventional commit type of the title.
"""

from typing import Dict, Iterable, List, Optional

from loguru import logger

from automr.ci.exceptions import LabelError

MAX_LABELS = 3

COMMIT_TYPE_LABELS: Dict[str, List[str]] = {
    "feat": ["feature", "enhancement"],
    "fix": ["bug", "bugfix", "fix"],
    "docs": ["documentation", "docs"],
    "refactor": ["refactor", "refactoring", "tech-debt"],
    "test": ["test", "testing", "tests"],
    "ci": ["ci", "ci/cd", "infrastructure"],
    "style": ["style", "formatting"],
    "perf": ["performance", "perf", "optimization"],
    "build": ["build", "dependencies"],
    "chore": ["chore", "maintenance"],
    "revert": ["revert"],
}


def extract_commit_type(title: str) -> Optional[str]:
    """
    Conventional commit type of a title.

    Examples:
        "feat(api): add endpoint" -> "feat"
        "Fix: typo" -> None (types are lowercase)
        "feat!: drop py2" -> None
    """
    colon = title.find(":")
    if colon < 1:
        return None

    prefix = title[:colon]
    paren = prefix.find("(")
    if paren > 0:
        prefix = prefix[:paren]
    prefix = prefix.strip()

    if not prefix or not all(c.isdigit() or ("a" <= c <= "z") for c in prefix):
        return None
    return prefix


def auto_select_labels(title: str, available: Iterable[str]) -> List[str]:
    """Repository labels matching the commit type, in candidate order."""
    commit_type = extract_commit_type(title)
    if commit_type is None:
        return []

    by_lower = {name.lower(): name for name in available}
    return [
        by_lower[candidate]
        for candidate in COMMIT_TYPE_LABELS.get(commit_type, [])
        if candidate in by_lower
    ]


def parse_labels(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def validate_labels(requested: str, available: Iterable[str]) -> List[str]:
    """
    Parse a comma-separated label list and check it against the repository.

    An empty string selects no labels.

    Raises:
        LabelError: Too many labels, or a label the repository does not have
    """
    labels = parse_labels(requested)
    if len(labels) > MAX_LABELS:
        raise LabelError(f"Too many labels specified: {len(labels)} (max: {MAX_LABELS})")

    known = set(available)
    for label in labels:
        if label not in known:
            raise LabelError(f"Label not found in repository: '{label}'. Use 'automr labels' to list them")
    return labels


def select_labels(title: str, available: Iterable[str], requested: Optional[str] = None) -> List[str]:
    """Explicit labels when requested is given, otherwise auto-selected ones."""
    available = list(available)
    if requested is not None:
        logger.debug("Using labels given on the command line")
        return validate_labels(requested, available)

    selected = auto_select_labels(title, available)
    if selected:
        logger.info(f"Auto-selected labels: {selected}")
    else:
        logger.debug("No labels matched the commit type")
    return selected
