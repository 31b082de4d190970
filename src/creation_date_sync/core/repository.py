"""Git repository access for history scanning using GitPython."""

from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

import git
from git import Repo

from creation_date_sync.errors import RepositoryNotFoundError
from creation_date_sync.logger import get_logger
from creation_date_sync.models import ChangeKind, CommitInfo, TreeChange

logger = get_logger(__name__)

_CHANGE_KINDS = {
    "A": ChangeKind.ADDED,
    "R": ChangeKind.RENAMED,
    "D": ChangeKind.REMOVED,
    "M": ChangeKind.MODIFIED,
    "T": ChangeKind.MODIFIED,
}


def _to_commit_info(commit: git.Commit) -> CommitInfo:
    return CommitInfo(
        hexsha=commit.hexsha,
        committed_at=commit.committed_datetime,
        parent_hexsha=commit.parents[0].hexsha if commit.parents else None,
    )


class GitHistoryRepository:
    """Read-only view of a git repository's first-parent history and tip."""

    def __init__(self, repo: Repo):
        if repo.bare or repo.working_tree_dir is None:
            raise RepositoryNotFoundError(f"Repository has no working tree: {repo.git_dir}")
        self.repo = repo

    @classmethod
    def discover(cls, path: Optional[Union[str, Path]] = None) -> "GitHistoryRepository":
        """Open the repository containing ``path`` (default: current directory)."""
        start = Path(path) if path is not None else Path.cwd()
        try:
            repo = Repo(start, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise RepositoryNotFoundError(
                f"{start} is not a part of Git repo."
            ) from e
        logger.debug("Discovered repository at %s", repo.working_tree_dir)
        return cls(repo)

    def __enter__(self) -> "GitHistoryRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the git helper processes GitPython keeps open."""
        self.repo.close()

    @property
    def working_dir(self) -> Path:
        return Path(self.repo.working_tree_dir)

    def has_commits(self) -> bool:
        try:
            self.repo.head.commit
        except ValueError:
            return False
        return True

    def head_description(self) -> str:
        """Describe the tip as ``<sha> (<branch>)``."""
        if not self.has_commits():
            return "(no commits)"
        sha = self.repo.head.commit.hexsha
        if self.repo.head.is_detached:
            return f"{sha} (detached HEAD)"
        return f"{sha} ({self.repo.active_branch.name})"

    def iter_first_parent_commits(self) -> Iterator[CommitInfo]:
        """Yield commits on the first-parent chain of HEAD, oldest first."""
        if not self.has_commits():
            return
        for commit in self.repo.iter_commits(
            "HEAD", first_parent=True, topo_order=True, reverse=True
        ):
            yield _to_commit_info(commit)

    def diff_with_parent(self, commit: CommitInfo) -> Iterable[TreeChange]:
        """Get tree changes introduced by ``commit`` relative to its first parent.

        A root commit is compared against the empty tree, so all its files
        are reported as added.
        """
        current = self.repo.commit(commit.hexsha)
        if commit.is_root:
            return [
                TreeChange(kind=ChangeKind.ADDED, path=item.path)
                for item in current.tree.traverse()
                if item.type == "blob"
            ]

        parent = self.repo.commit(commit.parent_hexsha)
        changes = []
        for diff in parent.diff(current, M=True):
            kind = _CHANGE_KINDS.get(diff.change_type)
            if kind is None:
                logger.debug("Ignoring change type %s in %s", diff.change_type, commit.hexsha)
                continue
            if kind == ChangeKind.RENAMED:
                changes.append(
                    TreeChange(kind=kind, path=diff.rename_to, old_path=diff.rename_from)
                )
            elif kind == ChangeKind.REMOVED:
                changes.append(TreeChange(kind=kind, path=diff.a_path))
            else:
                changes.append(TreeChange(kind=kind, path=diff.b_path))
        return changes

    def list_committed_files(self) -> List[str]:
        """Get paths of all files in the tip commit."""
        if not self.has_commits():
            return []
        return [
            item.path
            for item in self.repo.head.commit.tree.traverse()
            if item.type == "blob"
        ]

    def list_deleted_files(self) -> List[str]:
        """Get tip paths that are deleted in the index or working tree."""
        if not self.has_commits():
            return []
        output = self.repo.git.diff(
            "HEAD", "--name-only", "--no-renames", "--diff-filter=D", "-z"
        )
        return [path for path in output.split("\0") if path]

    def list_tracked_files(self) -> List[str]:
        """Get tip paths minus paths deleted locally, matched by path only."""
        deleted = set(self.list_deleted_files())
        return [path for path in self.list_committed_files() if path not in deleted]
