"""Bulk remove, copy and move orchestration.

Every operation follows Enumerate -> Fan-out Apply -> Finalize:

- remove: delete all files in parallel, then remove the emptied
  directory tree with one recursive call.
- copy: create directories and copy files in parallel, each at the same
  relative position under the destination.
- move: try one atomic rename; on any failure, copy then remove.

Operations are best-effort. Per-entry failures are collected in the
returned OperationReport and never abort the batch. A missing source is
a silent no-op.
"""

import logging
import os
import threading
import time
from collections.abc import Callable
from pathlib import Path

from bulkfs.core.copier import Copier
from bulkfs.core.dispatcher import Dispatcher, Echo
from bulkfs.core.primitives import remove_tree
from bulkfs.core.progress import NullReporter, ProgressReporter, RichProgressReporter
from bulkfs.core.walker import TreeWalker, classify_path
from bulkfs.models.entry import EntryKind
from bulkfs.models.outcome import ActionKind, EntryOutcome, OperationReport
from bulkfs.models.request import OperationKind, OperationRequest
from bulkfs.utils.formatting import console

logger = logging.getLogger(__name__)


class BulkOperator:
    """Runs remove, copy and move requests.

    Args:
        workers: Worker pool size for traversal and dispatch. Defaults to
            the logical CPU count.
        strict: When True, a move whose fallback copy reported any
            failure keeps its source instead of removing it.
        copier: File copy implementation. Defaults to the platform copier.
        reporter: Progress reporter used when a request asks for
            progress. Defaults to a Rich progress bar.
        echo: Output function for debug lines. Defaults to stdout.
        cancel_event: Shared cancellation flag for all dispatch phases.
    """

    def __init__(
        self,
        *,
        workers: int | None = None,
        strict: bool = False,
        copier: Copier | None = None,
        reporter: ProgressReporter | None = None,
        echo: Echo | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._workers = workers
        self._strict = strict
        self._copier = copier
        self._reporter = reporter
        self._echo = echo
        self._cancel_event = cancel_event or threading.Event()
        self._walker = TreeWalker(workers=workers)

    def cancel(self) -> None:
        """Request cancellation of entries not yet started."""
        self._cancel_event.set()

    def run(self, request: OperationRequest) -> OperationReport:
        """Dispatch a request to remove, copy or move by its kind.

        Args:
            request: The operation to perform.

        Returns:
            OperationReport with per-entry outcomes.
        """
        handlers: dict[OperationKind, Callable[[OperationRequest], OperationReport]] = {
            OperationKind.REMOVE: self.remove,
            OperationKind.COPY: self.copy,
            OperationKind.MOVE: self.move,
        }
        return handlers[request.kind](request)

    def remove(self, request: OperationRequest) -> OperationReport:
        """Recursively delete the request's source.

        Args:
            request: Request whose source is removed.

        Returns:
            OperationReport for the removal.
        """
        report = OperationReport(request=request)
        start = time.perf_counter()
        self._remove_path(request.source, self._dispatcher(request), report)
        report.elapsed = time.perf_counter() - start
        return report

    def copy(self, request: OperationRequest) -> OperationReport:
        """Recursively copy the request's source to its destination.

        Args:
            request: Request with source and destination.

        Returns:
            OperationReport for the copy.
        """
        report = OperationReport(request=request)
        start = time.perf_counter()
        self._copy_path(request.source, _destination(request), self._dispatcher(request), report)
        report.elapsed = time.perf_counter() - start
        return report

    def move(self, request: OperationRequest) -> OperationReport:
        """Move the request's source to its destination.

        Tries a single atomic rename first. If the rename fails for any
        reason (commonly a cross-device move), falls back to a full copy
        followed by a full remove of the source. There is no rollback:
        if the remove fails after a successful copy, data exists at both
        locations.

        Args:
            request: Request with source and destination.

        Returns:
            OperationReport for the move. ``renamed`` is True when the
            rename succeeded.
        """
        report = OperationReport(request=request)
        start = time.perf_counter()
        source = request.source
        destination = _destination(request)

        if classify_path(source) is None:
            report.source_missing = True
            report.elapsed = time.perf_counter() - start
            return report

        try:
            os.replace(source, destination)
        except OSError as e:
            logger.debug("Rename %s -> %s failed (%s); copying instead", source, destination, e)
            self._move_fallback(source, destination, self._dispatcher(request), report)
        else:
            report.renamed = True
            report.outcomes.append(EntryOutcome.ok(ActionKind.RENAME, source, target=destination))

        report.elapsed = time.perf_counter() - start
        return report

    def _move_fallback(
        self,
        source: Path,
        destination: Path,
        dispatcher: Dispatcher,
        report: OperationReport,
    ) -> None:
        self._copy_path(source, destination, dispatcher, report)
        if self._strict and not report.success:
            logger.warning(
                "Copy of %s finished with %d failure(s); source kept", source, report.failed
            )
            return
        self._remove_path(source, dispatcher, report)

    def _remove_path(self, source: Path, dispatcher: Dispatcher, report: OperationReport) -> None:
        kind = classify_path(source)
        if kind is None:
            report.source_missing = True
            return
        if kind != EntryKind.DIRECTORY:
            report.outcomes.append(dispatcher.delete_single(source))
            return

        tree = self._walker.walk(source)
        report.extend(dispatcher.delete_files(tree))
        if dispatcher.cancelled:
            return
        report.outcomes.append(remove_tree(tree.root))

    def _copy_path(
        self,
        source: Path,
        destination: Path,
        dispatcher: Dispatcher,
        report: OperationReport,
    ) -> None:
        kind = classify_path(source)
        if kind is None:
            report.source_missing = True
            return
        if kind != EntryKind.DIRECTORY:
            report.outcomes.append(dispatcher.copy_single(source, destination))
            return

        tree = self._walker.walk(source)
        report.extend(dispatcher.copy_tree(tree, destination))

    def _dispatcher(self, request: OperationRequest) -> Dispatcher:
        """Build the dispatcher for one request."""
        reporter: ProgressReporter
        if not request.progress:
            reporter = NullReporter()
        else:
            reporter = self._reporter or RichProgressReporter(console)
        return Dispatcher(
            workers=self._workers,
            reporter=reporter,
            copier=self._copier,
            debug=request.debug,
            echo=self._echo,
            cancel_event=self._cancel_event,
        )


def _destination(request: OperationRequest) -> Path:
    if request.destination is None:
        msg = f"Destination path is required for mode '{request.kind.value}'"
        raise ValueError(msg)
    return request.destination
