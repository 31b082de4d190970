"""Repository history protocol interface."""

from pathlib import Path
from typing import Iterable, Iterator, List, Protocol, runtime_checkable

from ..models import CommitInfo, TreeChange


@runtime_checkable
class RepositoryHistoryProtocol(Protocol):
    """Protocol for the repository operations the scanner and CLI need."""

    @property
    def working_dir(self) -> Path:
        """Root of the working tree."""
        ...

    def iter_first_parent_commits(self) -> Iterator[CommitInfo]:
        """Yield first-parent commits, oldest first."""
        ...

    def diff_with_parent(self, commit: CommitInfo) -> Iterable[TreeChange]:
        """Get changes between a commit and its first parent (or the empty tree)."""
        ...

    def head_description(self) -> str:
        """Describe the current HEAD for display."""
        ...

    def list_tracked_files(self) -> List[str]:
        """Get tip paths that still exist in the working tree or index."""
        ...
