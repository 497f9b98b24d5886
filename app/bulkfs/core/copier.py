"""File copy capability.

The dispatcher copies files through a Copier without knowing which
implementation is active. The implementation is chosen once per
platform by get_default_copier().
"""

import logging
import shutil
import sys
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

# CopyFileExW flag for unbuffered (direct) I/O on large files
COPY_FILE_NO_BUFFERING = 0x00001000


class Copier(ABC):
    """Copies one file's bytes and metadata from src to dst.

    Implementations raise OSError on failure. The destination's parent
    directory is guaranteed to exist when copy() is called.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier shown in debug logs."""

    @abstractmethod
    def copy(self, src: Path, dst: Path) -> None:
        """Copy src to dst, overwriting dst if it exists.

        Args:
            src: Source file (symlinks are copied as links, not followed).
            dst: Destination file path.

        Raises:
            OSError: If the copy fails.
        """


class BufferedCopier(Copier):
    """Standard buffered copy using shutil.copy2."""

    @property
    def name(self) -> str:
        return "buffered"

    def copy(self, src: Path, dst: Path) -> None:
        shutil.copy2(src, dst, follow_symlinks=False)


class UnbufferedCopier(Copier):
    """Direct-I/O copy using the Windows CopyFileExW call.

    Bypasses the system cache for large-file throughput. Only
    available on Windows.
    """

    def __init__(self) -> None:
        """Bind CopyFileExW from kernel32.

        Raises:
            OSError: If not running on Windows.
        """
        if sys.platform != "win32":
            msg = "UnbufferedCopier is only available on Windows"
            raise OSError(msg)

        import ctypes
        from ctypes import wintypes

        kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)  # type: ignore[attr-defined]
        copy_file_ex = kernel32.CopyFileExW
        copy_file_ex.argtypes = [
            wintypes.LPCWSTR,
            wintypes.LPCWSTR,
            ctypes.c_void_p,
            ctypes.c_void_p,
            ctypes.c_void_p,
            wintypes.DWORD,
        ]
        copy_file_ex.restype = wintypes.BOOL
        self._ctypes = ctypes
        self._copy_file_ex = copy_file_ex

    @property
    def name(self) -> str:
        return "unbuffered"

    def copy(self, src: Path, dst: Path) -> None:
        ok = self._copy_file_ex(str(src), str(dst), None, None, None, COPY_FILE_NO_BUFFERING)
        if not ok:
            code = self._ctypes.get_last_error()  # type: ignore[attr-defined]
            raise self._ctypes.WinError(code)  # type: ignore[attr-defined]


def get_default_copier() -> Copier:
    """Select the copier for the current platform.

    Windows uses the unbuffered CopyFileExW path; every other platform
    uses shutil.copy2.

    Returns:
        Copier instance for this platform.
    """
    if sys.platform == "win32":
        try:
            return UnbufferedCopier()
        except (OSError, AttributeError) as e:
            logger.warning("Unbuffered copy unavailable, using buffered copy: %s", e)
    return BufferedCopier()
