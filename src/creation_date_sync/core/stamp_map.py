"""Case-insensitive path to creation timestamp mapping."""

from datetime import datetime
from typing import Dict, Iterator, MutableMapping, Tuple


def normalize_path(path: str) -> str:
    """Use forward slashes as the path separator."""
    return path.replace("\\", "/")


def _fold_char(char: str) -> str:
    upper = char.upper()
    return upper if len(upper) == 1 else char


def fold_case(text: str) -> str:
    """Ignore case one character at a time.

    Characters whose uppercase form is longer than one character (such as
    ``ß``) are kept as they are, so ``straße`` and ``strasse`` stay distinct.
    """
    return "".join(map(_fold_char, text))


def _fold(path: str) -> str:
    return fold_case(normalize_path(path))


class StampMap(MutableMapping[str, datetime]):
    """Maps repository-relative paths to creation timestamps.

    Lookups ignore case and separator style. Each entry keeps the spelling of
    the path that first created it, so iteration shows paths the way they were
    found in history or in an import file.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[str, datetime]] = {}

    def __getitem__(self, path: str) -> datetime:
        return self._entries[_fold(path)][1]

    def __setitem__(self, path: str, stamp: datetime) -> None:
        key = _fold(path)
        existing = self._entries.get(key)
        original = existing[0] if existing else normalize_path(path)
        self._entries[key] = (original, stamp)

    def __delitem__(self, path: str) -> None:
        del self._entries[_fold(path)]

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and _fold(path) in self._entries

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"StampMap({dict(self.items())!r})"

    def try_add(self, path: str, stamp: datetime) -> bool:
        """Insert ``stamp`` unless ``path`` already has one.

        Returns True if the entry was added.
        """
        key = _fold(path)
        if key in self._entries:
            return False
        self._entries[key] = (normalize_path(path), stamp)
        return True
