"""
Display Manager for auto-mr.

Centralizes terminal output. JobBoard is the live job display driven by
the CI state tracker: one line per job, spinners for running jobs, and
in-place replacement so a job never occupies two lines.
"""
import threading
from contextlib import contextmanager
from typing import Any, Generator, List, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.spinner import Spinner
from rich.text import Text
from rich.theme import Theme

automr_theme = Theme({
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "queued": "dim",
    "running": "bold blue",
})

POSITIVE_MARKER = "✓"
NEGATIVE_MARKER = "✗"
PENDING_MARKER = "•"


class BoardLine:
    """One job line on a JobBoard."""

    def __init__(self, board: "JobBoard", text: str):
        self._board = board
        self.text = text
        self.marker = PENDING_MARKER
        self.style = "queued"

    @property
    def visible(self) -> bool:
        return bool(self.text)

    def _set(self, text: str, marker: str, style: str) -> None:
        self.text = text
        self.marker = marker
        self.style = style
        self._board.refresh()

    def finalize_positive(self, text: str) -> None:
        self._set(text, POSITIVE_MARKER, "success")

    def finalize_neutral(self, text: str) -> None:
        self._set(text, " ", "info")

    def finalize_negative(self, text: str) -> None:
        self._set(text, NEGATIVE_MARKER, "error")

    def __rich__(self) -> Any:
        return Text.assemble((f"{self.marker} ", self.style), (self.text, self.style))


class StaticLine(BoardLine):
    """Plain line for a queued or finished job."""

    def update(self, text: str) -> None:
        self._set(text, PENDING_MARKER, "queued")


class SpinnerLine(BoardLine):
    """Animated line for a running job."""

    def __init__(self, board: "JobBoard", text: str, spinner_type: str = "dots"):
        super().__init__(board, text)
        self.style = "running"
        self.active = True
        self._spinner = Spinner(spinner_type, text=Text(text, style="running"))

    def update_text(self, text: str) -> None:
        self.text = text
        self._spinner.update(text=Text(text, style="running"))
        self._board.refresh()

    def _set(self, text: str, marker: str, style: str) -> None:
        self.active = False
        super()._set(text, marker, style)

    def stop(self) -> None:
        self.active = False
        self._board.refresh()

    def __rich__(self) -> Any:
        if self.active:
            return self._spinner
        return super().__rich__()


class JobBoard:
    """
    Live-updating job list backed by rich.live.Live.

    Usage:
        with JobBoard(console) as board:
            poller = CompletionPoller(provider, board)
            poller.wait(sha, timeout)
    """

    def __init__(self, console: Optional[Console] = None, refresh_per_second: int = 8):
        self.console = console or Console(theme=automr_theme)
        self._lines: List[BoardLine] = []
        self._lock = threading.Lock()
        self._live: Optional[Live] = None
        self._refresh_per_second = refresh_per_second

    # DisplaySink -------------------------------------------------------

    def static_line(self, text: str, replacing: Optional[Any] = None) -> StaticLine:
        line = StaticLine(self, text)
        self._place(line, replacing)
        return line

    def animated_indicator(self, text: str, replacing: Optional[Any] = None) -> SpinnerLine:
        line = SpinnerLine(self, text)
        self._place(line, replacing)
        return line

    def success(self, text: str) -> None:
        self.console.print(f"[success]{POSITIVE_MARKER} {escape(text)}[/success]")

    def error(self, text: str) -> None:
        self.console.print(f"[error]{NEGATIVE_MARKER} {escape(text)}[/error]")

    def info(self, text: str) -> None:
        self.console.print(f"[info]{escape(text)}[/info]")

    # Layout ------------------------------------------------------------

    def _place(self, line: BoardLine, replacing: Optional[Any]) -> None:
        with self._lock:
            if replacing is not None and replacing in self._lines:
                self._lines[self._lines.index(replacing)] = line
            else:
                self._lines.append(line)
        self.refresh()

    @property
    def lines(self) -> List[BoardLine]:
        with self._lock:
            return list(self._lines)

    def __rich__(self) -> Group:
        return Group(*[line for line in self.lines if line.visible])

    def refresh(self) -> None:
        if self._live is not None:
            self._live.refresh()

    def start(self) -> None:
        if self._live is not None:
            return
        self._live = Live(
            self,
            console=self.console,
            refresh_per_second=self._refresh_per_second,
            transient=False,
        )
        self._live.start()

    def stop(self) -> None:
        if self._live is None:
            return
        with self._lock:
            for line in self._lines:
                if isinstance(line, SpinnerLine):
                    line.active = False
        live, self._live = self._live, None
        live.stop()

    def __enter__(self) -> "JobBoard":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


class DisplayManager:
    """
    Thread-safe singleton owning the application console.
    """

    _instance: Optional["DisplayManager"] = None
    _lock = threading.Lock()

    console: Console

    def __new__(cls) -> "DisplayManager":
        if cls._instance is None:
            with cls._lock:
                # Double-checked locking pattern
                if cls._instance is None:
                    cls._instance = super(DisplayManager, cls).__new__(cls)
                    cls._instance.console = Console(theme=automr_theme)
        return cls._instance

    @contextmanager
    def job_board(self) -> Generator[JobBoard, None, None]:
        """Run a live JobBoard for the duration of the block."""
        board = JobBoard(self.console)
        board.start()
        try:
            yield board
        finally:
            board.stop()

    @contextmanager
    def spinner(self, message: str, spinner_type: str = "dots") -> Generator[Any, None, None]:
        """Spinner for short blocking operations (config load, git lookups)."""
        with self.console.status(f"[bold blue]{message}[/bold blue]", spinner=spinner_type) as status:
            yield status

    def show_error(self, message: str, details: Optional[str] = None) -> None:
        self.console.print(f"[error]{NEGATIVE_MARKER} {escape(message)}[/error]")
        if details:
            self.console.print(f"[dim]{escape(details)}[/dim]")

    def show_success(self, message: str) -> None:
        self.console.print(f"[success]{POSITIVE_MARKER} {message}[/success]")

    def show_warning(self, message: str) -> None:
        self.console.print(f"[warning]{message}[/warning]")

    def show_info(self, message: str) -> None:
        self.console.print(f"[info]{message}[/info]")

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton instance (for testing)."""
        cls._instance = None


def get_display_manager() -> DisplayManager:
    """Get the global DisplayManager instance."""
    return DisplayManager()
