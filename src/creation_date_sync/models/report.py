"""Counters and per-file outcomes reported by the importers and applicator."""

from enum import Enum
from typing import List

from pydantic import BaseModel


class ImportResult(BaseModel):
    """Outcome of importing an external stamp source."""

    imported: int = 0
    skipped: int = 0


class WarningReason(str, Enum):
    """Why a tracked file was not updated."""

    MISSING_IN_HISTORY = "missing_in_history"
    MISSING_ON_DISK = "missing_on_disk"


class FileWarning(BaseModel):
    """A tracked file that was skipped."""

    path: str
    reason: WarningReason

    @property
    def message(self) -> str:
        if self.reason == WarningReason.MISSING_IN_HISTORY:
            return f"[Skipped] Cannot find file in commits: {self.path}"
        return f"[Skipped] File no longer exist: {self.path}"


class ApplyReport(BaseModel):
    """Running totals of a timestamp application pass."""

    processed: int = 0
    updated: int = 0
    warnings: List[FileWarning] = []

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
