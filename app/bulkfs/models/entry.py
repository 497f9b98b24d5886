"""Traversal models.

This module defines the structures produced by one enumeration pass
over a directory tree: the individual entries and the materialized
result that the dispatcher consumes.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class EntryKind(str, Enum):
    """Kind of a discovered filesystem entry.

    Attributes:
        FILE: Regular file or symbolic link (links are never followed).
        DIRECTORY: Real directory (not a symlink to one).
        OTHER: Socket, FIFO, device node or undeterminable type. Skipped.
    """

    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class FileSystemEntry:
    """One node discovered during traversal.

    Attributes:
        path: Absolute path of the entry.
        kind: Entry kind (file, directory or other).
        depth: Distance from the traversal root (0 for the root itself).
    """

    path: Path
    kind: EntryKind
    depth: int = 0

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if self.depth < 0:
            msg = f"Depth cannot be negative, got {self.depth}"
            raise ValueError(msg)

    @property
    def is_file(self) -> bool:
        """Check if this entry is a file."""
        return self.kind == EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        """Check if this entry is a directory."""
        return self.kind == EntryKind.DIRECTORY

    def relative_to(self, root: Path) -> Path:
        """Return the entry path relative to the traversal root.

        The root itself maps to ``Path(".")``.

        Args:
            root: Traversal root the entry was discovered under.

        Returns:
            Relative path of the entry.

        Raises:
            ValueError: If the entry is not under ``root``.
        """
        return self.path.relative_to(root)


@dataclass(frozen=True, slots=True)
class TraversalResult:
    """Materialized collection of entries from one enumeration pass.

    Entries are sorted by path so progress output is reproducible. Every
    entry is the root or a descendant of it, and no entry appears twice.

    Attributes:
        root: Traversal root.
        entries: All discovered entries, including the root.
    """

    root: Path
    entries: tuple[FileSystemEntry, ...] = ()

    def __post_init__(self) -> None:
        """Validate the containment and uniqueness invariants."""
        seen: set[Path] = set()
        for entry in self.entries:
            if entry.path != self.root and self.root not in entry.path.parents:
                msg = f"Entry {entry.path} is outside traversal root {self.root}"
                raise ValueError(msg)
            if entry.path in seen:
                msg = f"Duplicate entry: {entry.path}"
                raise ValueError(msg)
            seen.add(entry.path)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[FileSystemEntry]:
        return iter(self.entries)

    @property
    def files(self) -> list[FileSystemEntry]:
        """Get all file entries."""
        return [e for e in self.entries if e.is_file]

    @property
    def directories(self) -> list[FileSystemEntry]:
        """Get all directory entries."""
        return [e for e in self.entries if e.is_dir]
