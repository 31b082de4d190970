"""Commit model for first-parent history traversal."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CommitInfo(BaseModel):
    """A commit on the first-parent chain."""

    hexsha: str
    committed_at: datetime
    parent_hexsha: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def is_root(self) -> bool:
        """Check if the commit has no parent."""
        return self.parent_hexsha is None
