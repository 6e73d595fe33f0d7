"""
Tests for merge request label selection.
"""
import pytest

from automr.ci.exceptions import LabelError
from automr.mr.labels import (
    MAX_LABELS,
    auto_select_labels,
    extract_commit_type,
    parse_labels,
    select_labels,
    validate_labels,
)

AVAILABLE = ["Bug", "enhancement", "feature", "documentation", "ci/cd"]


class TestExtractCommitType:
    """Tests for conventional commit parsing."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("feat: add endpoint", "feat"),
            ("fix(api): handle 404", "fix"),
            ("ci : tweak runners", "ci"),
            ("Feat: capitalised", None),
            ("feat!: breaking", None),
            ("no colon here", None),
            (": empty", None),
            ("", None),
        ],
    )
    def test_extract(self, title, expected):
        assert extract_commit_type(title) == expected


class TestAutoSelect:
    """Tests for automatic label selection."""

    def test_matches_in_candidate_order(self):
        assert auto_select_labels("feat: x", AVAILABLE) == ["feature", "enhancement"]

    def test_case_insensitive_keeps_repository_spelling(self):
        assert auto_select_labels("fix: x", AVAILABLE) == ["Bug"]

    def test_unknown_type(self):
        assert auto_select_labels("wip: x", AVAILABLE) == []

    def test_no_type(self):
        assert auto_select_labels("Update readme", AVAILABLE) == []


class TestValidateLabels:
    """Tests for explicit label lists."""

    def test_parse_trims_and_drops_empty(self):
        assert parse_labels(" bug , ,feature,") == ["bug", "feature"]

    def test_empty_string_selects_none(self):
        assert validate_labels("", AVAILABLE) == []

    def test_valid(self):
        assert validate_labels("Bug,feature", AVAILABLE) == ["Bug", "feature"]

    def test_unknown_label(self):
        with pytest.raises(LabelError, match="'nope'"):
            validate_labels("Bug,nope", AVAILABLE)

    def test_too_many(self):
        with pytest.raises(LabelError, match="max: 3"):
            validate_labels(",".join(AVAILABLE[: MAX_LABELS + 1]), AVAILABLE)


class TestSelectLabels:
    """Tests for select_labels dispatch."""

    def test_explicit_overrides_auto(self):
        assert select_labels("feat: x", AVAILABLE, "documentation") == ["documentation"]

    def test_explicit_empty_disables_auto(self):
        assert select_labels("feat: x", AVAILABLE, "") == []

    def test_auto_when_not_given(self):
        assert select_labels("docs: x", AVAILABLE) == ["documentation"]
