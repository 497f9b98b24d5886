"""Per-entry outcomes and the aggregated operation report.

Every action primitive returns an EntryOutcome instead of raising, so the
dispatcher can aggregate failures without aborting sibling entries.
"""

import errno
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from bulkfs.models.request import OperationRequest


class ActionKind(str, Enum):
    """Side effect attempted for a single entry."""

    DELETE_FILE = "delete_file"
    COPY_FILE = "copy_file"
    CREATE_DIRECTORY = "create_directory"
    REMOVE_TREE = "remove_tree"
    RENAME = "rename"


class ErrorKind(str, Enum):
    """Classification of a failed action.

    Attributes:
        NOT_FOUND: Path vanished or never existed.
        PERMISSION_DENIED: Insufficient permissions or read-only media.
        NO_SPACE: Destination device is full.
        NAME_TOO_LONG: Path or component exceeds the platform limit.
        BUSY: File or device is in use.
        CANCELLED: Entry was skipped because the operation was cancelled.
        OTHER: Any other OS error.
    """

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    NO_SPACE = "no_space"
    NAME_TOO_LONG = "name_too_long"
    BUSY = "busy"
    CANCELLED = "cancelled"
    OTHER = "other"

    @classmethod
    def from_os_error(cls, exc: OSError) -> "ErrorKind":
        """Map an OSError to an ErrorKind using its errno."""
        if isinstance(exc, FileNotFoundError):
            return cls.NOT_FOUND
        if isinstance(exc, PermissionError):
            return cls.PERMISSION_DENIED
        return _ERRNO_KINDS.get(exc.errno or 0, cls.OTHER)


_ERRNO_KINDS: dict[int, ErrorKind] = {
    errno.ENOENT: ErrorKind.NOT_FOUND,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EPERM: ErrorKind.PERMISSION_DENIED,
    errno.EROFS: ErrorKind.PERMISSION_DENIED,
    errno.ENOSPC: ErrorKind.NO_SPACE,
    errno.ENAMETOOLONG: ErrorKind.NAME_TOO_LONG,
    errno.EBUSY: ErrorKind.BUSY,
    errno.ETXTBSY: ErrorKind.BUSY,
}


@dataclass(frozen=True, slots=True)
class EntryOutcome:
    """Result of one action applied to one entry.

    Attributes:
        action: The attempted action.
        path: Path the action was applied to (the source for copies).
        success: Whether the action completed.
        target: Destination path for copies and renames.
        error_kind: Error classification when the action failed.
        error: Error message when the action failed.
    """

    action: ActionKind
    path: Path
    success: bool
    target: Path | None = None
    error_kind: ErrorKind | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the action failed."""
        return not self.success

    @classmethod
    def ok(cls, action: ActionKind, path: Path, target: Path | None = None) -> "EntryOutcome":
        """Create a successful outcome."""
        return cls(action=action, path=path, success=True, target=target)

    @classmethod
    def from_error(
        cls,
        action: ActionKind,
        path: Path,
        exc: OSError,
        target: Path | None = None,
    ) -> "EntryOutcome":
        """Create a failed outcome from an OSError."""
        return cls(
            action=action,
            path=path,
            success=False,
            target=target,
            error_kind=ErrorKind.from_os_error(exc),
            error=exc.strerror or str(exc),
        )

    @classmethod
    def cancelled(cls, action: ActionKind, path: Path, target: Path | None = None) -> "EntryOutcome":
        """Create an outcome for an entry skipped by cancellation."""
        return cls(
            action=action,
            path=path,
            success=False,
            target=target,
            error_kind=ErrorKind.CANCELLED,
            error="Operation cancelled",
        )


@dataclass(slots=True)
class OperationReport:
    """Aggregated result of one bulk operation.

    Attributes:
        request: The request that produced this report.
        outcomes: Per-entry outcomes in completion order.
        renamed: True when a move completed with a single atomic rename.
        source_missing: True when the source did not exist (no-op).
        elapsed: Wall-clock duration in seconds.
    """

    request: OperationRequest
    outcomes: list[EntryOutcome] = field(default_factory=list)
    renamed: bool = False
    source_missing: bool = False
    elapsed: float = 0.0

    @property
    def succeeded(self) -> int:
        """Count of successful entry actions."""
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failures(self) -> list[EntryOutcome]:
        """All failed entry actions."""
        return [o for o in self.outcomes if o.failed]

    @property
    def failed(self) -> int:
        """Count of failed entry actions."""
        return len(self.failures)

    @property
    def success(self) -> bool:
        """Check if no entry action failed."""
        return self.failed == 0

    def extend(self, outcomes: list[EntryOutcome]) -> None:
        """Append outcomes from a dispatch phase."""
        self.outcomes.extend(outcomes)
