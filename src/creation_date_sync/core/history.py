"""Derive creation stamps from first-parent commit history."""

from datetime import datetime
from typing import Optional

from creation_date_sync.core.stamp_map import StampMap
from creation_date_sync.logger import get_logger
from creation_date_sync.models import ChangeKind
from creation_date_sync.protocols import RepositoryHistoryProtocol

logger = get_logger(__name__)


def import_stamps_from_commits(
    history: RepositoryHistoryProtocol,
    stamps: StampMap,
    initial_commit_time: Optional[datetime] = None,
) -> int:
    """Add a stamp for every path first seen in history.

    Commits are visited oldest first. Paths that already have a stamp, from an
    import or an earlier commit, keep it. A renamed path inherits the stamp of
    its old location when there is one.

    Args:
        history: Repository to scan
        stamps: Map to extend in place
        initial_commit_time: Date to use instead of the oldest commit's own date

    Returns:
        Number of stamps added
    """
    imported = 0
    first = True

    for commit in history.iter_first_parent_commits():
        commit_date = commit.committed_at
        if first and initial_commit_time is not None:
            commit_date = initial_commit_time
        first = False

        changes = list(history.diff_with_parent(commit))
        added = [c for c in changes if c.kind == ChangeKind.ADDED]
        renamed = [c for c in changes if c.kind == ChangeKind.RENAMED]

        for change in added:
            if stamps.try_add(change.path, commit_date):
                imported += 1

        # Keep the creation date of the old location across a rename
        for change in renamed:
            stamp = stamps.get(change.old_path, commit_date)
            if stamps.try_add(change.path, stamp):
                imported += 1

        logger.debug(
            "Commit %s (%s): %d added, %d renamed",
            commit.hexsha[:10],
            commit_date.isoformat(),
            len(added),
            len(renamed),
        )

    return imported
