"""Data models for bulkfs.

This package contains the data structures passed between the walker,
the dispatcher and the orchestrator.
"""

from bulkfs.models.entry import EntryKind, FileSystemEntry, TraversalResult
from bulkfs.models.outcome import ActionKind, EntryOutcome, ErrorKind, OperationReport
from bulkfs.models.request import OperationKind, OperationRequest

__all__ = [
    "ActionKind",
    "EntryKind",
    "EntryOutcome",
    "ErrorKind",
    "FileSystemEntry",
    "OperationKind",
    "OperationReport",
    "OperationRequest",
    "TraversalResult",
]
