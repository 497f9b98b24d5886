"""Parallel per-entry dispatch.

Applies one action primitive to every entry of a TraversalResult on a
bounded thread pool. Entries are independent: there is no ordering
between them, and one entry's failure never blocks or cancels another.
"""

import logging
import os
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from bulkfs.core.copier import Copier, get_default_copier
from bulkfs.core.primitives import copy_file, create_directory, delete_file
from bulkfs.core.progress import NullReporter, ProgressReporter
from bulkfs.models.entry import EntryKind, FileSystemEntry, TraversalResult
from bulkfs.models.outcome import ActionKind, EntryOutcome
from bulkfs.utils.formatting import echo as console_echo

logger = logging.getLogger(__name__)

Echo = Callable[[str], None]
EntryAction = Callable[[FileSystemEntry], EntryOutcome | None]


def default_workers() -> int:
    """Get the default pool size (logical CPU count, at least 1)."""
    return os.cpu_count() or 1


class Dispatcher:
    """Fans out per-entry actions across a worker pool.

    Args:
        workers: Pool size. Defaults to the logical CPU count.
        reporter: Progress reporter. Defaults to a NullReporter.
        copier: File copy implementation. Defaults to the platform copier.
        debug: Emit one line per action before performing it.
        echo: Output function for debug lines. Defaults to stdout.
        cancel_event: Shared flag; once set, entries not yet started
            are recorded as cancelled without touching the disk.
    """

    def __init__(
        self,
        *,
        workers: int | None = None,
        reporter: ProgressReporter | None = None,
        copier: Copier | None = None,
        debug: bool = False,
        echo: Echo | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if workers is not None and workers < 1:
            msg = f"Worker count must be at least 1, got {workers}"
            raise ValueError(msg)
        self._workers = workers or default_workers()
        self._reporter = reporter or NullReporter()
        self._copier = copier or get_default_copier()
        self._debug = debug
        self._echo = echo or console_echo
        self._cancel_event = cancel_event or threading.Event()
        logger.debug("Dispatcher: %d workers, %s copier", self._workers, self._copier.name)

    @property
    def workers(self) -> int:
        """Number of worker threads."""
        return self._workers

    @property
    def cancelled(self) -> bool:
        """Check if cancellation was requested."""
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Request cancellation of entries not yet started."""
        self._cancel_event.set()

    def delete_files(self, result: TraversalResult) -> list[EntryOutcome]:
        """Delete every file entry in parallel.

        Directories are left in place for a single bulk removal
        afterwards, but still count towards progress.

        Args:
            result: Enumerated tree.

        Returns:
            One outcome per file entry.
        """
        return self._run(list(result), self._delete_entry)

    def copy_tree(self, result: TraversalResult, destination: Path) -> list[EntryOutcome]:
        """Copy every entry to the same relative position under destination.

        Directory entries are created, file entries are copied. Both run
        in the same pool; each file copy creates its own parent chain.

        Args:
            result: Enumerated source tree.
            destination: Destination root.

        Returns:
            One outcome per file and directory entry.
        """
        src_root = result.root
        dst_root = Path(os.path.abspath(destination))

        def action(entry: FileSystemEntry) -> EntryOutcome | None:
            return self._copy_entry(entry, dst_root / entry.relative_to(src_root))

        return self._run(list(result), action)

    def copy_single(self, src: Path, dst: Path) -> EntryOutcome:
        """Copy one file outside of the pool."""
        if self.cancelled:
            return EntryOutcome.cancelled(ActionKind.COPY_FILE, src, target=dst)
        if self._debug:
            self._echo(f"{src} -> {dst}")
        return copy_file(src, dst, self._copier)

    def delete_single(self, path: Path) -> EntryOutcome:
        """Delete one file outside of the pool."""
        if self.cancelled:
            return EntryOutcome.cancelled(ActionKind.DELETE_FILE, path)
        if self._debug:
            self._echo(f"Trash: {path}")
        return delete_file(path)

    def _run(self, entries: list[FileSystemEntry], action: EntryAction) -> list[EntryOutcome]:
        """Apply action to all entries on the pool and collect outcomes."""
        outcomes: list[EntryOutcome] = []
        self._reporter.start(len(entries))
        try:
            with ThreadPoolExecutor(
                max_workers=self._workers, thread_name_prefix="dispatch"
            ) as pool:
                futures = [pool.submit(self._apply, action, entry) for entry in entries]
                try:
                    for future in as_completed(futures):
                        outcome = future.result()
                        if outcome is not None:
                            outcomes.append(outcome)
                except KeyboardInterrupt:
                    self.cancel()
                    raise
        finally:
            self._reporter.finish()

        failed = sum(1 for o in outcomes if o.failed)
        logger.debug(
            "Dispatched %d entries on %d workers (%d failed)",
            len(entries),
            self._workers,
            failed,
        )
        return outcomes

    def _apply(self, action: EntryAction, entry: FileSystemEntry) -> EntryOutcome | None:
        outcome = action(entry)
        self._reporter.increment()
        return outcome

    def _delete_entry(self, entry: FileSystemEntry) -> EntryOutcome | None:
        if entry.kind != EntryKind.FILE:
            return None
        return self.delete_single(entry.path)

    def _copy_entry(self, entry: FileSystemEntry, target: Path) -> EntryOutcome | None:
        if entry.kind == EntryKind.DIRECTORY:
            if self.cancelled:
                return EntryOutcome.cancelled(ActionKind.CREATE_DIRECTORY, target)
            return create_directory(target)
        if entry.kind == EntryKind.FILE:
            self._reporter.set_status(entry.path.name)
            return self.copy_single(entry.path, target)
        return None
