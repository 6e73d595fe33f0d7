"""
Tests for the JobBoard display sink and DisplayManager.
"""
import io

import pytest
from rich.console import Console

from automr.ci.protocols import AnimatedIndicator, DisplaySink, StaticHandle
from automr.ci.tracker import StateTracker
from automr.utils.display import (
    DisplayManager,
    NEGATIVE_MARKER,
    POSITIVE_MARKER,
    JobBoard,
    SpinnerLine,
    StaticLine,
    automr_theme,
)
from conftest import completed, make_job, running


@pytest.fixture
def console():
    return Console(file=io.StringIO(), theme=automr_theme, width=80, color_system=None)


@pytest.fixture
def board(console):
    return JobBoard(console)


def render(console, board) -> str:
    console.print(board)
    return console.file.getvalue()


class TestJobBoard:
    """Tests for JobBoard line management."""

    def test_satisfies_protocols(self, board):
        assert isinstance(board, DisplaySink)
        assert isinstance(board.static_line("a"), StaticHandle)
        assert isinstance(board.animated_indicator("b"), AnimatedIndicator)

    def test_lines_append_in_order(self, board):
        first = board.static_line("one")
        second = board.animated_indicator("two")
        assert board.lines == [first, second]

    def test_replacing_swaps_in_place(self, board):
        board.static_line("top")
        queued = board.static_line("middle (queued)")
        board.static_line("bottom")

        spinner = board.animated_indicator("middle (running)", replacing=queued)

        assert [line.text for line in board.lines] == ["top", "middle (running)", "bottom"]
        assert board.lines[1] is spinner

    def test_unknown_replacing_appends(self, board):
        board.static_line("a")
        board.static_line("b", replacing=object())
        assert len(board.lines) == 2

    def test_empty_line_is_hidden(self, console, board):
        line = board.static_line("visible")
        line.update("")
        board.static_line("other")
        output = render(console, board)
        assert "visible" not in output
        assert "other" in output

    def test_finalize_markers(self, console, board):
        board.static_line("x").finalize_positive("ok job")
        board.static_line("y").finalize_negative("bad job")
        board.static_line("z").finalize_neutral("skipped job")

        output = render(console, board)

        assert "✓ ok job" in output
        assert "✗ bad job" in output
        assert "skipped job" in output

    def test_spinner_stop_freezes_text(self, console, board):
        spinner = board.animated_indicator("build (running)")
        spinner.update_text("build (running, 3s)")
        spinner.stop()

        assert spinner.active is False
        assert "build (running, 3s)" in render(console, board)

    def test_spinner_finalize_deactivates(self, board):
        spinner = board.animated_indicator("build")
        spinner.finalize_positive("build (success)")
        assert spinner.active is False
        assert spinner.text == "build (success)"

    def test_summary_lines(self, console, board):
        board.success("Pipeline completed successfully - total time: 5s")
        board.error("Pipeline failed - total time: 5s")
        board.info("No pipeline configured")

        output = console.file.getvalue()
        assert "✓ Pipeline completed successfully" in output
        assert "✗ Pipeline failed" in output
        assert "No pipeline configured" in output

    def test_start_stop(self, board):
        spinner = board.animated_indicator("x")
        with board:
            assert board._live is not None
        assert board._live is None
        assert spinner.active is False


class TestTrackerWithBoard:
    """The tracker never leaves two lines for one job on a real board."""

    def test_one_line_per_job(self, board):
        tracker = StateTracker(board, refresh_interval=0)

        tracker.update([make_job(1, name="lint"), make_job(2, name="test")])
        tracker.update([running(1, name="lint"), make_job(2, name="test")])
        tracker.update([make_job(1, name="lint"), running(2, name="test")])
        tracker.update([completed(1, "success", name="lint"), completed(2, "failure", name="test")])

        lines = board.lines
        assert len(lines) == 2
        assert lines[0].text == "lint (success)"
        assert lines[1].text == "test (failure)"
        assert not any(isinstance(line, SpinnerLine) and line.active for line in lines)
        assert isinstance(lines[0], StaticLine)

    def test_outcome_markers_survive_later_polls(self, board):
        tracker = StateTracker(board, refresh_interval=0)
        batch = [completed(1, "success"), completed(2, "failure"), running(3, name="deploy")]

        tracker.update(batch)
        first = [(line.marker, line.text) for line in board.lines]
        tracker.update(batch)
        second = [(line.marker, line.text) for line in board.lines]

        assert first[:2] == [(POSITIVE_MARKER, "build (success)"), (NEGATIVE_MARKER, "build (failure)")]
        assert second[:2] == first[:2]

    def test_indicator_handles_match_their_kind(self, board):
        tracker = StateTracker(board, refresh_interval=0)
        tracker.update([make_job(1), running(2)])

        static, animated = tracker.indicator(1), tracker.indicator(2)
        assert not static.is_animated
        assert isinstance(static.handle, StaticHandle)
        assert animated.is_animated
        assert isinstance(animated.handle, AnimatedIndicator)


class TestDisplayManager:
    """Tests for the DisplayManager singleton."""

    def test_singleton(self):
        DisplayManager.reset_instance()
        try:
            assert DisplayManager() is DisplayManager()
        finally:
            DisplayManager.reset_instance()

    def test_job_board_context(self, console):
        DisplayManager.reset_instance()
        try:
            manager = DisplayManager()
            manager.console = console
            with manager.job_board() as board:
                board.static_line("inside")
            assert board._live is None
        finally:
            DisplayManager.reset_instance()
