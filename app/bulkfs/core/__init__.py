"""Core engine for bulkfs.

Tree enumeration, parallel dispatch, action primitives and the
remove/copy/move orchestration.
"""

from bulkfs.core.copier import BufferedCopier, Copier, UnbufferedCopier, get_default_copier
from bulkfs.core.dispatcher import Dispatcher
from bulkfs.core.operations import BulkOperator
from bulkfs.core.progress import NullReporter, ProgressReporter, RichProgressReporter
from bulkfs.core.walker import TreeWalker, classify_path

__all__ = [
    "BufferedCopier",
    "BulkOperator",
    "Copier",
    "Dispatcher",
    "NullReporter",
    "ProgressReporter",
    "RichProgressReporter",
    "TreeWalker",
    "UnbufferedCopier",
    "classify_path",
    "get_default_copier",
]
