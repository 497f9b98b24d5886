"""Parallel tree enumeration.

Walks a directory tree with one os.scandir task per directory on a
thread pool, so enumeration of large trees does not serialize on
directory-read latency. The full tree is materialized before any
action is applied.

Symlinks are never followed: a link (to a file, to a directory, or
dangling) is reported as an opaque FILE entry.
"""

import logging
import os
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path

from bulkfs.models.entry import EntryKind, FileSystemEntry, TraversalResult

logger = logging.getLogger(__name__)


def classify_path(path: Path) -> EntryKind | None:
    """Determine the kind of a path without following symlinks.

    Args:
        path: Path to classify.

    Returns:
        EntryKind, or None if the path does not exist or cannot be read.
    """
    try:
        if path.is_symlink():
            return EntryKind.FILE
        if path.is_dir():
            return EntryKind.DIRECTORY
        if path.is_file():
            return EntryKind.FILE
    except OSError as e:
        logger.debug("Cannot classify %s: %s", path, e)
        return None
    if os.path.lexists(path):
        return EntryKind.OTHER
    return None


def _classify_dir_entry(entry: os.DirEntry[str]) -> EntryKind:
    """Classify a scandir entry without following symlinks.

    Raises:
        OSError: If the entry type cannot be determined.
    """
    if entry.is_symlink():
        return EntryKind.FILE
    if entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    if entry.is_file(follow_symlinks=False):
        return EntryKind.FILE
    return EntryKind.OTHER


class TreeWalker:
    """Enumerates every entry under a root path in parallel.

    Args:
        workers: Maximum number of concurrent directory reads. Defaults
            to the executor's own default when None.
    """

    def __init__(self, workers: int | None = None) -> None:
        self._workers = workers

    def walk(self, root: Path) -> TraversalResult:
        """Enumerate the root and everything beneath it.

        Unreadable directories are still reported themselves, but their
        children are omitted. Entries whose type cannot be determined
        are omitted. Nothing is raised for either case.

        Args:
            root: Traversal root. Relative paths are made absolute.

        Returns:
            TraversalResult sorted by path. Empty when root does not exist.
        """
        root = Path(os.path.abspath(root))
        root_kind = classify_path(root)
        if root_kind is None:
            return TraversalResult(root=root)

        entries: list[FileSystemEntry] = [FileSystemEntry(path=root, kind=root_kind, depth=0)]
        if root_kind != EntryKind.DIRECTORY:
            return TraversalResult(root=root, entries=tuple(entries))

        with ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="walk") as pool:
            pending: set[Future[list[FileSystemEntry]]] = {pool.submit(self._scan, root, 1)}
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    for child in future.result():
                        entries.append(child)
                        if child.is_dir:
                            pending.add(pool.submit(self._scan, child.path, child.depth + 1))

        entries.sort(key=lambda e: e.path)
        logger.debug("Enumerated %d entries under %s", len(entries), root)
        return TraversalResult(root=root, entries=tuple(entries))

    @staticmethod
    def _scan(directory: Path, depth: int) -> list[FileSystemEntry]:
        """Read the immediate children of one directory.

        Args:
            directory: Directory to list.
            depth: Depth assigned to the children.

        Returns:
            Child entries; empty if the directory cannot be listed.
        """
        children: list[FileSystemEntry] = []
        try:
            with os.scandir(directory) as it:
                for entry in it:
                    try:
                        kind = _classify_dir_entry(entry)
                    except OSError as e:
                        logger.debug("Skipping unreadable entry %s: %s", entry.path, e)
                        continue
                    children.append(FileSystemEntry(path=Path(entry.path), kind=kind, depth=depth))
        except OSError as e:
            logger.debug("Cannot list directory %s: %s", directory, e)
        return children
