"""
Tests for job label and duration formatting.
"""
from datetime import timedelta

import pytest

from automr.ci.formatting import compose_label, format_duration, status_word
from automr.ci.models import JobStatus
from conftest import T0, make_job


class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "0s"),
            (45, "45s"),
            (83, "1m 23s"),
            (8130, "135m 30s"),
            (60, "1m 0s"),
        ],
    )
    def test_formats(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_rounds_to_nearest_second(self):
        assert format_duration(44.6) == "45s"
        assert format_duration(59.4) == "59s"
        assert format_duration(59.5) == "1m 0s"

    def test_accepts_timedelta(self):
        assert format_duration(timedelta(hours=8)) == "480m 0s"

    def test_negative_clamps_to_zero(self):
        assert format_duration(-3) == "0s"


class TestComposeLabel:
    """Tests for compose_label."""

    def test_queued_without_timestamps(self):
        job = make_job(name="lint")
        assert compose_label(job) == "lint (queued)"

    def test_group_prefix(self):
        job = make_job(name="unit", group="test")
        assert compose_label(job) == "test/unit (queued)"

    def test_empty_group_has_no_prefix(self):
        job = make_job(name="unit", group="")
        assert compose_label(job) == "unit (queued)"

    def test_running_shows_elapsed(self):
        job = make_job(name="build", status=JobStatus.RUNNING, started_after=0)
        now = T0 + timedelta(seconds=83)
        assert compose_label(job, now) == "build (running, 1m 23s)"

    def test_running_without_start_omits_duration(self):
        job = make_job(name="build", status=JobStatus.RUNNING)
        assert compose_label(job, T0) == "build (running)"

    def test_completed_uses_conclusion_and_total(self):
        job = make_job(
            name="deploy",
            status=JobStatus.COMPLETED,
            conclusion="failure",
            started_after=10,
            completed_after=55,
        )
        # now is ignored once both timestamps are known
        assert compose_label(job, T0 + timedelta(hours=1)) == "deploy (failure, 45s)"

    def test_queued_with_start_omits_duration(self):
        job = make_job(name="build", started_after=0)
        assert compose_label(job, T0 + timedelta(seconds=30)) == "build (queued)"


class TestStatusWord:
    """Tests for status_word."""

    def test_words(self):
        assert status_word(make_job()) == "queued"
        assert status_word(make_job(status=JobStatus.RUNNING)) == "running"
        assert status_word(make_job(status=JobStatus.COMPLETED, conclusion="skipped")) == "skipped"
