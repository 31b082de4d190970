"""Creation date derivation engine."""

from .applicator import apply_creation_stamps
from .binary_tree import SerializedTree, import_stamps_from_binary_file
from .history import import_stamps_from_commits
from .repository import GitHistoryRepository
from .stamp_map import StampMap
from .text_importer import import_stamps_from_file, import_stamps_from_lines

__all__ = [
    "GitHistoryRepository",
    "SerializedTree",
    "StampMap",
    "apply_creation_stamps",
    "import_stamps_from_binary_file",
    "import_stamps_from_commits",
    "import_stamps_from_file",
    "import_stamps_from_lines",
]
