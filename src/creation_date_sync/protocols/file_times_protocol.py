"""Filesystem creation time protocol interface."""

from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class CreationTimeSetterProtocol(Protocol):
    """Protocol for setting a file's creation time."""

    def set_creation_time(self, path: Path, when: datetime) -> None:
        """Set the creation time of ``path`` to the UTC datetime ``when``."""
        ...
