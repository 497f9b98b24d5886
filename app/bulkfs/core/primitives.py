"""Single-entry action primitives.

Each primitive performs one side effect on one path and reports the
result as an EntryOutcome. OS errors never escape: a failing entry must
not abort its siblings.
"""

import logging
import shutil
from pathlib import Path

from bulkfs.core.copier import Copier
from bulkfs.models.outcome import ActionKind, EntryOutcome

logger = logging.getLogger(__name__)


def delete_file(path: Path) -> EntryOutcome:
    """Delete a single file or symlink.

    Args:
        path: File to delete.

    Returns:
        EntryOutcome for the deletion.
    """
    try:
        path.unlink()
    except OSError as e:
        logger.debug("Delete failed for %s: %s", path, e)
        return EntryOutcome.from_error(ActionKind.DELETE_FILE, path, e)
    return EntryOutcome.ok(ActionKind.DELETE_FILE, path)


def create_directory(path: Path) -> EntryOutcome:
    """Create a directory and all missing ancestors.

    Idempotent: an existing directory is a success.

    Args:
        path: Directory to create.

    Returns:
        EntryOutcome for the creation.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.debug("Create directory failed for %s: %s", path, e)
        return EntryOutcome.from_error(ActionKind.CREATE_DIRECTORY, path, e)
    return EntryOutcome.ok(ActionKind.CREATE_DIRECTORY, path)


def copy_file(src: Path, dst: Path, copier: Copier) -> EntryOutcome:
    """Copy one file, creating the destination's parent chain first.

    Args:
        src: Source file.
        dst: Destination file path.
        copier: Copy implementation for bytes and metadata.

    Returns:
        EntryOutcome for the copy, with ``target`` set to ``dst``.
    """
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        copier.copy(src, dst)
    except OSError as e:
        logger.debug("Copy failed for %s -> %s: %s", src, dst, e)
        return EntryOutcome.from_error(ActionKind.COPY_FILE, src, e, target=dst)
    return EntryOutcome.ok(ActionKind.COPY_FILE, src, target=dst)


def remove_tree(path: Path) -> EntryOutcome:
    """Recursively remove a directory tree in one call.

    Used after all files have been deleted in parallel, so normally
    only empty directories remain.

    Args:
        path: Root directory to remove.

    Returns:
        EntryOutcome for the removal.
    """
    try:
        shutil.rmtree(path)
    except OSError as e:
        logger.debug("Tree removal failed for %s: %s", path, e)
        return EntryOutcome.from_error(ActionKind.REMOVE_TREE, path, e)
    return EntryOutcome.ok(ActionKind.REMOVE_TREE, path)
