"""Data models for git-sync-creation-date."""

from .change import ChangeKind, TreeChange
from .commit import CommitInfo
from .report import ApplyReport, FileWarning, ImportResult, WarningReason

__all__ = [
    "ApplyReport",
    "ChangeKind",
    "CommitInfo",
    "FileWarning",
    "ImportResult",
    "TreeChange",
    "WarningReason",
]
