"""Operation request model.

Describes one top-level bulk operation as selected on the command line.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class OperationKind(str, Enum):
    """Bulk operation selected by the user.

    Values match the ``--mode`` argument of the CLI.

    Attributes:
        REMOVE: Recursively delete the source.
        COPY: Recursively copy the source to the destination.
        MOVE: Rename the source, falling back to copy + remove.
    """

    REMOVE = "rm"
    COPY = "cp"
    MOVE = "mv"

    @property
    def needs_destination(self) -> bool:
        """Check if this operation requires a destination path."""
        return self in (OperationKind.COPY, OperationKind.MOVE)


@dataclass(frozen=True, slots=True)
class OperationRequest:
    """Top-level unit of work.

    Immutable once dispatched. Failures are recorded per entry; the
    request itself is never retried.

    Attributes:
        source: Source file or directory.
        kind: Operation to perform.
        destination: Destination path (copy and move only).
        debug: Print one line per entry action before performing it.
        progress: Render a live progress bar.
    """

    source: Path
    kind: OperationKind
    destination: Path | None = None
    debug: bool = False
    progress: bool = False

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if self.kind.needs_destination and self.destination is None:
            msg = f"Destination path is required for mode '{self.kind.value}'"
            raise ValueError(msg)
