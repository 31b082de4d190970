"""Tree change model for diffs between two commits."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ChangeKind(str, Enum):
    """How a path changed between two trees."""

    ADDED = "added"
    RENAMED = "renamed"
    REMOVED = "removed"
    MODIFIED = "modified"


class TreeChange(BaseModel):
    """A single path-level change between a commit and its parent."""

    kind: ChangeKind
    path: str
    old_path: Optional[str] = None  # Only set for renames

    model_config = {"frozen": True}
