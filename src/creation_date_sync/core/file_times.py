"""Set file creation (birth) times.

Windows sets creation time through the Win32 API; macOS goes through
``SetFile`` from the Xcode command line tools. Other platforms cannot set a
file's birth time.
"""

import platform
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Tuple

from creation_date_sync.errors import CreationTimeNotSupportedError
from creation_date_sync.logger import get_logger

logger = get_logger(__name__)

# Windows FILETIME counts 100-nanosecond intervals since 1601-01-01 UTC
_WIN_EPOCH_OFFSET = 11644473600


def _as_utc(when: datetime) -> datetime:
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


def to_filetime(when: datetime) -> int:
    """Convert a datetime into a Windows FILETIME integer."""
    when = _as_utc(when)
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    delta = when - epoch
    return (
        (delta.days * 86400 + delta.seconds + _WIN_EPOCH_OFFSET) * 10_000_000
        + delta.microseconds * 10
    )


class WindowsCreationTimeSetter:
    """Set creation time with ``SetFileTime``, leaving other times untouched."""

    GENERIC_WRITE = 0x40000000
    FILE_SHARE_READ = 0x01
    FILE_SHARE_WRITE = 0x02
    OPEN_EXISTING = 3
    FILE_FLAG_BACKUP_SEMANTICS = 0x02000000

    def __init__(self):
        import ctypes
        from ctypes import wintypes

        class FILETIME(ctypes.Structure):
            _fields_ = [
                ("dwLowDateTime", wintypes.DWORD),
                ("dwHighDateTime", wintypes.DWORD),
            ]

        self._ctypes = ctypes
        self._filetime_cls = FILETIME
        self._kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
        self._kernel32.CreateFileW.restype = wintypes.HANDLE
        self._kernel32.SetFileTime.argtypes = [
            wintypes.HANDLE,
            ctypes.POINTER(FILETIME),
            ctypes.POINTER(FILETIME),
            ctypes.POINTER(FILETIME),
        ]
        self._kernel32.CloseHandle.argtypes = [wintypes.HANDLE]
        self._invalid_handle = wintypes.HANDLE(-1).value

    def set_creation_time(self, path: Path, when: datetime) -> None:
        ctypes = self._ctypes
        ft = to_filetime(when)
        creation_time = self._filetime_cls(ft & 0xFFFFFFFF, ft >> 32)

        handle = self._kernel32.CreateFileW(
            str(path),
            self.GENERIC_WRITE,
            self.FILE_SHARE_READ | self.FILE_SHARE_WRITE,
            None,
            self.OPEN_EXISTING,
            self.FILE_FLAG_BACKUP_SEMANTICS,
            None,
        )
        if handle == self._invalid_handle:
            raise ctypes.WinError(ctypes.get_last_error())
        try:
            if not self._kernel32.SetFileTime(
                handle, ctypes.byref(creation_time), None, None
            ):
                raise ctypes.WinError(ctypes.get_last_error())
        finally:
            self._kernel32.CloseHandle(handle)


class MacCreationTimeSetter:
    """Set creation time with ``SetFile -d``, which takes local time."""

    def __init__(self, executable: str = "SetFile"):
        self.executable = executable

    def set_creation_time(self, path: Path, when: datetime) -> None:
        local = _as_utc(when).astimezone()
        result = subprocess.run(  # noqa: S603
            [self.executable, "-d", local.strftime("%m/%d/%Y %H:%M:%S"), str(path)],
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            raise OSError(f"SetFile failed for {path}: {result.stderr.strip()}")


class NullCreationTimeSetter:
    """Record requested updates without touching the filesystem."""

    def __init__(self):
        self.calls: List[Tuple[Path, datetime]] = []

    def set_creation_time(self, path: Path, when: datetime) -> None:
        logger.debug("Would set creation time of %s to %s", path, when.isoformat())
        self.calls.append((path, when))


def get_creation_time_setter():
    """Get the creation time setter for the current platform."""
    system = platform.system()
    if system == "Windows":
        return WindowsCreationTimeSetter()
    if system == "Darwin":
        executable = shutil.which("SetFile")
        if executable is None:
            raise CreationTimeNotSupportedError(
                "SetFile not found; install Xcode command line tools "
                "(xcode-select --install)"
            )
        return MacCreationTimeSetter(executable)
    raise CreationTimeNotSupportedError(
        f"File creation time cannot be set on {system}. Use --dry-run to preview."
    )
