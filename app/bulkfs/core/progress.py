"""Progress reporting.

The dispatcher signals progress through an injected ProgressReporter
instead of shared global state. Reporting never affects control flow.
"""

import threading
from abc import ABC, abstractmethod

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)


class ProgressReporter(ABC):
    """Receives per-entry progress signals from the dispatcher.

    Implementations must tolerate concurrent calls from worker threads.
    """

    @abstractmethod
    def start(self, total: int) -> None:
        """Begin reporting for ``total`` entries."""

    @abstractmethod
    def increment(self) -> None:
        """Record one processed entry."""

    @abstractmethod
    def set_status(self, text: str) -> None:
        """Show a transient status message (last writer wins)."""

    @abstractmethod
    def finish(self) -> None:
        """Signal completion and clear any visual state."""


class NullReporter(ProgressReporter):
    """Reporter that ignores every signal."""

    def start(self, total: int) -> None:
        pass

    def increment(self) -> None:
        pass

    def set_status(self, text: str) -> None:
        pass

    def finish(self) -> None:
        pass


class RichProgressReporter(ProgressReporter):
    """Live terminal progress bar backed by rich.progress.

    Shows a spinner, elapsed time, the bar, processed/total entries,
    the ETA and the current status message. The bar is removed from
    the terminal on finish.

    Args:
        console: Console to render on. Debug lines printed through the
            same console appear above the bar.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console
        self._lock = threading.Lock()
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None

    def start(self, total: int) -> None:
        with self._lock:
            if self._progress is not None:
                self._progress.stop()
            # A move fallback runs copy then remove, each with its own bar
            self._progress = Progress(
                SpinnerColumn(style="green"),
                TimeElapsedColumn(),
                BarColumn(bar_width=40, style="blue", complete_style="cyan"),
                MofNCompleteColumn(),
                TimeRemainingColumn(),
                TextColumn("{task.fields[status]}", style="dim", markup=False),
                console=self._console,
                transient=True,
            )
            self._progress.start()
            self._task_id = self._progress.add_task("bulkfs", total=total, status="")

    def increment(self) -> None:
        with self._lock:
            if self._progress is not None and self._task_id is not None:
                self._progress.advance(self._task_id)

    def set_status(self, text: str) -> None:
        with self._lock:
            if self._progress is not None and self._task_id is not None:
                self._progress.update(self._task_id, status=text)

    def finish(self) -> None:
        with self._lock:
            if self._progress is None:
                return
            self._progress.stop()
            self._progress = None
            self._task_id = None
