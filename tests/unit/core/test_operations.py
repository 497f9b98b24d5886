"""Unit tests for remove, copy and move orchestration.

Covers the end-to-end properties of each operation: completeness,
copy fidelity, move equivalence and fallback, error tolerance, and
no-op behaviour on a missing source.
"""

import errno
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from bulkfs.core.copier import BufferedCopier
from bulkfs.core.operations import BulkOperator
from bulkfs.models.outcome import ActionKind, ErrorKind
from bulkfs.models.request import OperationKind, OperationRequest


def _request(
    kind: OperationKind,
    source: Path,
    destination: Path | None = None,
    **kwargs: bool,
) -> OperationRequest:
    return OperationRequest(source=source, kind=kind, destination=destination, **kwargs)


def _cross_device(*args: object, **kwargs: object) -> None:
    raise OSError(errno.EXDEV, "Invalid cross-device link")


@pytest.fixture
def operator() -> BulkOperator:
    """BulkOperator with a small pool and the buffered copier."""
    return BulkOperator(workers=4, copier=BufferedCopier())


class TestConcreteScenario:
    """A/x.txt ("hello") and empty A/sub through copy, remove and move."""

    def test_copy(self, operator: BulkOperator, sample_tree: Path, tmp_path: Path) -> None:
        """copy(A, B) reproduces the file and the empty directory."""
        dst = tmp_path / "B"

        report = operator.copy(_request(OperationKind.COPY, sample_tree, dst))

        assert report.success is True
        assert (dst / "x.txt").read_text() == "hello"
        assert (dst / "sub").is_dir()
        assert list((dst / "sub").iterdir()) == []
        assert (sample_tree / "x.txt").exists()

    def test_remove(self, operator: BulkOperator, sample_tree: Path) -> None:
        """remove(A) leaves nothing behind."""
        report = operator.remove(_request(OperationKind.REMOVE, sample_tree))

        assert report.success is True
        assert not sample_tree.exists()

    def test_move(self, operator: BulkOperator, sample_tree: Path, tmp_path: Path, snapshot) -> None:
        """move(A, C) relocates the tree intact."""
        before = snapshot(sample_tree)
        dst = tmp_path / "C"

        report = operator.move(_request(OperationKind.MOVE, sample_tree, dst))

        assert report.success is True
        assert report.renamed is True
        assert not sample_tree.exists()
        assert snapshot(dst) == before


class TestRemove:
    """Tests for BulkOperator.remove."""

    def test_remove_completeness(self, operator: BulkOperator, nested_tree: Path) -> None:
        """A whole tree, including empty directories, is removed."""
        report = operator.remove(_request(OperationKind.REMOVE, nested_tree))

        assert not nested_tree.exists()
        assert report.outcomes[-1].action == ActionKind.REMOVE_TREE
        assert report.outcomes[-1].success is True

    def test_two_phases(self, operator: BulkOperator, nested_tree: Path) -> None:
        """All file deletes are recorded before the single tree removal."""
        report = operator.remove(_request(OperationKind.REMOVE, nested_tree))

        actions = [o.action for o in report.outcomes]
        assert actions.count(ActionKind.REMOVE_TREE) == 1
        assert actions[-1] == ActionKind.REMOVE_TREE
        assert set(actions[:-1]) == {ActionKind.DELETE_FILE}

    def test_remove_single_file(self, operator: BulkOperator, tmp_path: Path) -> None:
        """A file source is deleted directly."""
        f = tmp_path / "lonely.txt"
        f.write_text("x")

        report = operator.remove(_request(OperationKind.REMOVE, f))

        assert not f.exists()
        assert [o.action for o in report.outcomes] == [ActionKind.DELETE_FILE]

    def test_remove_keeps_symlink_target(self, operator: BulkOperator, tmp_path: Path) -> None:
        """Removing a tree with a directory link never touches the link target."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "keep.txt").write_text("keep")
        root = tmp_path / "root"
        root.mkdir()
        (root / "link").symlink_to(outside, target_is_directory=True)

        operator.remove(_request(OperationKind.REMOVE, root))

        assert not root.exists()
        assert (outside / "keep.txt").read_text() == "keep"

    def test_remove_error_tolerance(self, operator: BulkOperator, nested_tree: Path) -> None:
        """One undeletable file does not stop the others."""
        locked = nested_tree / "a" / "b" / "two.bin"
        real_unlink = Path.unlink

        def flaky_unlink(self: Path, missing_ok: bool = False) -> None:
            if self == locked:
                raise PermissionError(13, "Permission denied", str(self))
            real_unlink(self, missing_ok=missing_ok)

        not_empty = OSError(errno.ENOTEMPTY, "Directory not empty")
        with (
            patch.object(Path, "unlink", flaky_unlink),
            patch("bulkfs.core.primitives.shutil.rmtree", side_effect=not_empty),
        ):
            report = operator.remove(_request(OperationKind.REMOVE, nested_tree))

        assert locked.exists()
        assert [p for p in nested_tree.rglob("*") if p.is_file()] == [locked]
        assert report.failed == 2
        assert {f.action for f in report.failures} == {
            ActionKind.DELETE_FILE,
            ActionKind.REMOVE_TREE,
        }

    def test_missing_source_noop(self, operator: BulkOperator, tmp_path: Path) -> None:
        """A nonexistent source is a silent no-op."""
        report = operator.remove(_request(OperationKind.REMOVE, tmp_path / "missing"))

        assert report.source_missing is True
        assert report.outcomes == []
        assert report.success is True

    def test_progress_requested(self, nested_tree: Path, recording_reporter) -> None:
        """The injected reporter is used when the request asks for progress."""
        operator = BulkOperator(reporter=recording_reporter)

        operator.remove(_request(OperationKind.REMOVE, nested_tree, progress=True))

        assert recording_reporter.finished == 1
        assert recording_reporter.increments == recording_reporter.totals[0]

    def test_progress_not_requested(self, nested_tree: Path, recording_reporter) -> None:
        """Without the progress flag the injected reporter stays silent."""
        operator = BulkOperator(reporter=recording_reporter)

        operator.remove(_request(OperationKind.REMOVE, nested_tree))

        assert recording_reporter.totals == []
        assert recording_reporter.increments == 0


class TestCopy:
    """Tests for BulkOperator.copy."""

    def test_copy_fidelity(
        self, operator: BulkOperator, nested_tree: Path, tmp_path: Path, snapshot
    ) -> None:
        """Relative paths and bytes match the source exactly."""
        dst = tmp_path / "mirror"

        report = operator.copy(_request(OperationKind.COPY, nested_tree, dst))

        assert report.success is True
        assert snapshot(dst) == snapshot(nested_tree)

    def test_copy_into_existing_directory(
        self, operator: BulkOperator, sample_tree: Path, tmp_path: Path
    ) -> None:
        """Contents are merged into an existing destination directory."""
        dst = tmp_path / "existing"
        dst.mkdir()
        (dst / "other.txt").write_text("other")

        operator.copy(_request(OperationKind.COPY, sample_tree, dst))

        assert (dst / "x.txt").read_text() == "hello"
        assert (dst / "other.txt").read_text() == "other"
        assert not (dst / "A").exists()

    def test_copy_single_file(self, operator: BulkOperator, tmp_path: Path) -> None:
        """A file source is copied to the destination path, creating parents."""
        src = tmp_path / "one.txt"
        src.write_text("1")
        dst = tmp_path / "out" / "renamed.txt"

        report = operator.copy(_request(OperationKind.COPY, src, dst))

        assert dst.read_text() == "1"
        assert [o.action for o in report.outcomes] == [ActionKind.COPY_FILE]

    def test_copy_debug_output(self, sample_tree: Path, tmp_path: Path) -> None:
        """Debug lines go to the injected echo function."""
        lines: list[str] = []
        operator = BulkOperator(copier=BufferedCopier(), echo=lines.append)
        dst = tmp_path / "B"

        operator.copy(_request(OperationKind.COPY, sample_tree, dst, debug=True))

        assert lines == [f"{sample_tree / 'x.txt'} -> {dst / 'x.txt'}"]

    def test_copy_error_tolerance(
        self, sample_tree: Path, tmp_path: Path, failing_copier_factory
    ) -> None:
        """A failing file is reported while directories are still created."""
        (sample_tree / "y.txt").write_text("y")
        operator = BulkOperator(copier=failing_copier_factory({"x.txt"}))
        dst = tmp_path / "B"

        report = operator.copy(_request(OperationKind.COPY, sample_tree, dst))

        assert report.failed == 1
        assert report.failures[0].error_kind == ErrorKind.PERMISSION_DENIED
        assert (dst / "y.txt").read_text() == "y"
        assert (dst / "sub").is_dir()

    def test_missing_source_noop(self, operator: BulkOperator, tmp_path: Path) -> None:
        """Copying a missing source does not create the destination."""
        dst = tmp_path / "B"

        report = operator.copy(_request(OperationKind.COPY, tmp_path / "missing", dst))

        assert report.source_missing is True
        assert not dst.exists()


class TestMove:
    """Tests for BulkOperator.move."""

    def test_rename_same_volume(
        self, operator: BulkOperator, nested_tree: Path, tmp_path: Path, snapshot
    ) -> None:
        """Same-volume moves are a single rename."""
        before = snapshot(nested_tree)
        dst = tmp_path / "moved"

        report = operator.move(_request(OperationKind.MOVE, nested_tree, dst))

        assert report.renamed is True
        assert [o.action for o in report.outcomes] == [ActionKind.RENAME]
        assert not nested_tree.exists()
        assert snapshot(dst) == before

    def test_move_equals_copy_then_remove(
        self, operator: BulkOperator, tmp_path: Path, snapshot
    ) -> None:
        """move(T, D) ends in the same state as copy(T, D) + remove(T)."""
        def build(root: Path) -> Path:
            (root / "d" / "e").mkdir(parents=True)
            (root / "f.txt").write_text("f")
            (root / "d" / "e" / "g.txt").write_text("g")
            return root

        moved_src = build(tmp_path / "T1")
        composed_src = build(tmp_path / "T2")

        operator.move(_request(OperationKind.MOVE, moved_src, tmp_path / "D1"))
        operator.copy(_request(OperationKind.COPY, composed_src, tmp_path / "D2"))
        operator.remove(_request(OperationKind.REMOVE, composed_src))

        assert not moved_src.exists()
        assert not composed_src.exists()
        assert snapshot(tmp_path / "D1") == snapshot(tmp_path / "D2")

    def test_cross_device_fallback(
        self, operator: BulkOperator, nested_tree: Path, tmp_path: Path, snapshot
    ) -> None:
        """A failed rename falls back to copy followed by remove."""
        before = snapshot(nested_tree)
        dst = tmp_path / "other_volume"

        with patch("bulkfs.core.operations.os.replace", side_effect=_cross_device):
            report = operator.move(_request(OperationKind.MOVE, nested_tree, dst))

        assert report.renamed is False
        assert report.success is True
        assert not nested_tree.exists()
        assert snapshot(dst) == before
        actions = {o.action for o in report.outcomes}
        assert ActionKind.COPY_FILE in actions
        assert ActionKind.REMOVE_TREE in actions
        assert ActionKind.RENAME not in actions

    def test_fallback_single_file(self, operator: BulkOperator, tmp_path: Path) -> None:
        """A single file also falls back to copy + delete."""
        src = tmp_path / "f.txt"
        src.write_text("payload")
        dst = tmp_path / "elsewhere" / "f.txt"

        with patch("bulkfs.core.operations.os.replace", side_effect=_cross_device):
            report = operator.move(_request(OperationKind.MOVE, src, dst))

        assert not src.exists()
        assert dst.read_text() == "payload"
        assert [o.action for o in report.outcomes] == [
            ActionKind.COPY_FILE,
            ActionKind.DELETE_FILE,
        ]

    def test_fallback_removes_source_after_partial_copy(
        self, sample_tree: Path, tmp_path: Path, failing_copier_factory
    ) -> None:
        """Default mode has no rollback: the source is removed anyway."""
        operator = BulkOperator(copier=failing_copier_factory({"x.txt"}))
        dst = tmp_path / "C"

        with patch("bulkfs.core.operations.os.replace", side_effect=_cross_device):
            report = operator.move(_request(OperationKind.MOVE, sample_tree, dst))

        assert report.failed == 1
        assert not sample_tree.exists()
        assert not (dst / "x.txt").exists()

    def test_strict_keeps_source_after_partial_copy(
        self, sample_tree: Path, tmp_path: Path, failing_copier_factory
    ) -> None:
        """Strict mode skips the remove when the copy was incomplete."""
        operator = BulkOperator(strict=True, copier=failing_copier_factory({"x.txt"}))
        dst = tmp_path / "C"

        with patch("bulkfs.core.operations.os.replace", side_effect=_cross_device):
            report = operator.move(_request(OperationKind.MOVE, sample_tree, dst))

        assert report.failed == 1
        assert (sample_tree / "x.txt").read_text() == "hello"
        assert (dst / "sub").is_dir()

    def test_strict_complete_copy_still_removes(
        self, sample_tree: Path, tmp_path: Path
    ) -> None:
        """Strict mode removes the source when the copy succeeded."""
        operator = BulkOperator(strict=True, copier=BufferedCopier())

        with patch("bulkfs.core.operations.os.replace", side_effect=_cross_device):
            operator.move(_request(OperationKind.MOVE, sample_tree, tmp_path / "C"))

        assert not sample_tree.exists()
        assert (tmp_path / "C" / "x.txt").read_text() == "hello"

    def test_missing_source_noop(self, operator: BulkOperator, tmp_path: Path) -> None:
        """Moving a missing source changes nothing."""
        dst = tmp_path / "C"

        with patch("bulkfs.core.operations.os.replace") as mock_replace:
            report = operator.move(_request(OperationKind.MOVE, tmp_path / "missing", dst))

        mock_replace.assert_not_called()
        assert report.source_missing is True
        assert not dst.exists()


class TestRun:
    """Tests for BulkOperator.run dispatch."""

    @pytest.mark.parametrize("kind", list(OperationKind))
    def test_dispatches_by_kind(self, kind: OperationKind, tmp_path: Path) -> None:
        """run() calls the handler matching the request kind."""
        operator = BulkOperator(copier=BufferedCopier())
        dst = tmp_path / "dst" if kind.needs_destination else None
        request = _request(kind, tmp_path / "missing", dst)
        method = {"rm": "remove", "cp": "copy", "mv": "move"}[kind.value]

        with patch.object(BulkOperator, method, autospec=True) as handler:
            operator.run(request)

        handler.assert_called_once_with(operator, request)

    def test_relative_paths(
        self, operator: BulkOperator, sample_tree: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Relative source and destination paths work from the current directory."""
        monkeypatch.chdir(sample_tree.parent)

        operator.run(_request(OperationKind.COPY, Path("A"), Path("B")))

        assert (sample_tree.parent / "B" / "x.txt").read_text() == "hello"
        assert os.path.isdir(sample_tree.parent / "B" / "sub")
