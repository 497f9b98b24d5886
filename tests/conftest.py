"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import threading
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from bulkfs.core.copier import BufferedCopier, Copier
from bulkfs.core.progress import ProgressReporter


class RecordingReporter(ProgressReporter):
    """Progress reporter that records every signal."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.totals: list[int] = []
        self.increments = 0
        self.statuses: list[str] = []
        self.finished = 0

    def start(self, total: int) -> None:
        self.totals.append(total)

    def increment(self) -> None:
        with self._lock:
            self.increments += 1

    def set_status(self, text: str) -> None:
        with self._lock:
            self.statuses.append(text)

    def finish(self) -> None:
        self.finished += 1


class FailingCopier(Copier):
    """Copier that fails for chosen file names and copies everything else."""

    def __init__(self, fail_names: set[str]) -> None:
        self._fail_names = fail_names
        self._inner = BufferedCopier()

    @property
    def name(self) -> str:
        return "failing"

    def copy(self, src: Path, dst: Path) -> None:
        if src.name in self._fail_names:
            raise PermissionError(13, "Permission denied", str(src))
        self._inner.copy(src, dst)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point XDG_CONFIG_HOME at a temp dir so no user config leaks in."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    yield config_home


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Directory A with A/x.txt ("hello") and an empty A/sub."""
    root = tmp_path / "A"
    root.mkdir()
    (root / "x.txt").write_text("hello")
    (root / "sub").mkdir()
    return root


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    """A deeper tree with files at several levels and an empty leaf dir."""
    root = tmp_path / "nested"
    (root / "a" / "b" / "c").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "top.txt").write_text("top")
    (root / "a" / "one.txt").write_text("one")
    (root / "a" / "b" / "two.bin").write_bytes(bytes(range(256)) * 64)
    (root / "a" / "b" / "c" / "three.txt").write_text("three")
    for i in range(20):
        (root / "a" / f"many_{i:02d}.txt").write_text(f"file {i}")
    return root


@pytest.fixture
def recording_reporter() -> RecordingReporter:
    """Fresh RecordingReporter."""
    return RecordingReporter()


@pytest.fixture
def failing_copier_factory() -> type[FailingCopier]:
    """Factory for copiers that fail on selected file names."""
    return FailingCopier


def relative_tree(root: Path) -> dict[str, bytes | None]:
    """Map each relative path under root to file bytes (None for dirs)."""
    result: dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        result[rel] = None if path.is_dir() else path.read_bytes()
    return result


@pytest.fixture
def snapshot() -> Callable[[Path], dict[str, bytes | None]]:
    """Expose relative_tree() as a fixture for tree comparisons."""
    return relative_tree
