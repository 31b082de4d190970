"""Shared fixtures for building throwaway git repositories."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional

import msgpack
import pytest
from git import Repo

D1 = datetime(2015, 3, 1, 9, 0, tzinfo=timezone.utc)
D2 = datetime(2016, 6, 15, 12, 30, tzinfo=timezone(timedelta(hours=2)))
D3 = datetime(2018, 1, 20, 18, 45, tzinfo=timezone(timedelta(hours=-5)))


def git_date(when: datetime) -> str:
    """Format a datetime in git's internal ``<seconds> <offset>`` form."""
    return f"{int(when.timestamp())} {when.strftime('%z')}"


class RepoBuilder:
    """Create commits with fixed dates in a real repository."""

    def __init__(self, repo: Repo):
        self.repo = repo
        self.root = Path(repo.working_tree_dir)

    def write(self, path: str, content: Optional[str] = None) -> None:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content if content is not None else f"content of {path}\n")

    def commit(
        self,
        message: str,
        when: datetime,
        add: Iterable[str] = (),
        rename: Optional[Dict[str, str]] = None,
        remove: Iterable[str] = (),
        contents: Optional[Dict[str, str]] = None,
    ):
        contents = contents or {}
        index = self.repo.index
        add = list(add)
        for path in add:
            self.write(path, contents.get(path))
        if add:
            index.add(add)
        for old, new in (rename or {}).items():
            (self.root / new).parent.mkdir(parents=True, exist_ok=True)
            (self.root / old).rename(self.root / new)
            index.remove([old])
            index.add([new])
        remove = list(remove)
        if remove:
            index.remove(remove, working_tree=True)
        date = git_date(when)
        return index.commit(message, author_date=date, commit_date=date)


@pytest.fixture
def git_project(tmp_path):
    """Create an empty git repository with a configured user."""
    repo = Repo.init(tmp_path / "project")
    with repo.config_writer() as config:
        config.set_value("user", "name", "Test User")
        config.set_value("user", "email", "test@example.com")
    yield RepoBuilder(repo)
    repo.close()


def encode_name_table(names: Iterable[str]):
    """Build a length-prefixed UTF-16 code unit table; returns (cells, offsets)."""
    cells = [0]
    offsets = {}
    for name in names:
        units = name.encode("utf-16-le")
        codes = [int.from_bytes(units[i : i + 2], "little") for i in range(0, len(units), 2)]
        offsets[name] = len(cells)
        cells.append(len(codes))
        cells.extend(codes)
    return cells, offsets


def pack_tree(strings, nodes) -> bytes:
    """Pack ``[strings, nodes]`` where nodes are ``(name_idx, child_info, datetime)``."""
    payload = [
        strings,
        [[name, info, msgpack.Timestamp.from_datetime(time)] for name, info, time in nodes],
    ]
    return msgpack.packb(payload, datetime=False)
