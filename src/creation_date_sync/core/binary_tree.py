"""Decoder for MessagePack-encoded creation time trees.

A tree file captures creation times of a directory hierarchy from before the
repository history began. The MessagePack root is ``[strings, nodes]``:

- ``strings`` is a flat array of UTF-16 code units. A name is stored as a
  length cell followed by that many code units.
- ``nodes`` is an array of ``[name_index, child_info, time]``. The low 31 bits
  of ``child_info`` hold the index of the first child, the high bit marks the
  last node of a sibling run. Siblings sit at consecutive indices.

Node 0 is a sentinel (index 0 doubles as "no child"); the root is the last node.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import (
    BinaryIO,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import msgpack

from creation_date_sync.core.stamp_map import StampMap, fold_case, normalize_path
from creation_date_sync.errors import BinaryStampFileError, StampPathNotFoundError
from creation_date_sync.logger import get_logger
from creation_date_sync.models import ImportResult

logger = get_logger(__name__)

FIRST_CHILD_INDEX_MASK = 0x7FFF_FFFF
IS_LAST_CHILD_MASK = 0x8000_0000


class Node(NamedTuple):
    """A single entry of the node array."""

    name_index: int
    child_info: int
    time: datetime

    @property
    def first_child_index(self) -> int:
        return self.child_info & FIRST_CHILD_INDEX_MASK

    @property
    def is_last_child(self) -> bool:
        return (self.child_info & IS_LAST_CHILD_MASK) != 0

    @property
    def is_leaf(self) -> bool:
        return self.first_child_index == 0


def _decode_time(value: object) -> datetime:
    if isinstance(value, msgpack.Timestamp):
        value = value.to_datetime()
    if not isinstance(value, datetime):
        raise BinaryStampFileError(f"Node time is not a timestamp: {value!r}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _decode_strings(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)) and all(isinstance(c, int) for c in value):
        try:
            return "".join(map(chr, value))
        except (ValueError, OverflowError) as e:
            raise BinaryStampFileError(f"Invalid character in string table: {e}") from e
    raise BinaryStampFileError("String table must be an array of UTF-16 code units")


def _decode_node(value: object) -> Node:
    if not isinstance(value, (list, tuple)) or len(value) < 3:
        raise BinaryStampFileError(f"Malformed node entry: {value!r}")
    name_index, child_info, time = value[0], value[1], value[2]
    if not isinstance(name_index, int) or not isinstance(child_info, int):
        raise BinaryStampFileError(f"Malformed node entry: {value!r}")
    return Node(name_index, child_info & 0xFFFF_FFFF, _decode_time(time))


class SerializedTree:
    """Read-only view over a decoded node array.

    Lookups walk the flat array directly instead of building a linked tree.
    """

    def __init__(self, strings: str, nodes: Sequence[Node]):
        if not nodes:
            raise BinaryStampFileError("Tree contains no nodes")
        self.strings = strings
        self.nodes: List[Node] = list(nodes)

    @classmethod
    def from_bytes(cls, data: bytes) -> "SerializedTree":
        try:
            payload = msgpack.unpackb(data, timestamp=3, raw=False, strict_map_key=False)
        except (ValueError, msgpack.UnpackException) as e:
            raise BinaryStampFileError(f"Cannot decode bin file: {e}") from e
        return cls._from_payload(payload)

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "SerializedTree":
        return cls.from_bytes(stream.read())

    @classmethod
    def load(cls, path: Union[str, Path]) -> "SerializedTree":
        with open(path, "rb") as f:
            return cls.from_stream(f)

    @classmethod
    def _from_payload(cls, payload: object) -> "SerializedTree":
        if not isinstance(payload, (list, tuple)) or len(payload) < 2:
            raise BinaryStampFileError("Bin file root must be a [strings, nodes] array")
        strings, nodes = payload[0], payload[1]
        if not isinstance(nodes, (list, tuple)):
            raise BinaryStampFileError("Node table must be an array")
        return cls(_decode_strings(strings), [_decode_node(n) for n in nodes])

    @property
    def root_index(self) -> int:
        return len(self.nodes) - 1

    def _node(self, index: int) -> Node:
        if index <= 0 or index >= len(self.nodes):
            raise BinaryStampFileError(f"Node index {index} is out of range")
        return self.nodes[index]

    def get_name(self, index: int) -> str:
        """Decode the name of the node at ``index``."""
        str_index = self._node(index).name_index
        if str_index < 0 or str_index >= len(self.strings):
            raise BinaryStampFileError(f"String index {str_index} is out of range")
        length = ord(self.strings[str_index])
        start = str_index + 1
        if start + length > len(self.strings):
            raise BinaryStampFileError(f"String at {str_index} runs past the table")
        cells = self.strings[start : start + length]
        # Re-pair UTF-16 surrogates stored as separate code units
        return cells.encode("utf-16-le", "surrogatepass").decode("utf-16-le")

    def iter_children(self, index: int) -> Iterator[int]:
        """Yield child indices of a node by following its sibling run."""
        child = self.nodes[index].first_child_index
        while child != 0:
            node = self._node(child)
            yield child
            child = 0 if node.is_last_child else child + 1

    def find_node(self, path: str) -> Optional[int]:
        """Find a node by ``/``-separated path, ignoring case. Root for ``""``."""
        current = self.root_index
        for chunk in (c for c in normalize_path(path).split("/") if c):
            wanted = fold_case(chunk)
            current = next(
                (i for i in self.iter_children(current) if fold_case(self.get_name(i)) == wanted),
                None,
            )
            if current is None:
                return None
        return current

    def get_creation_stamps_from_path(self, path: str) -> Iterator[Tuple[str, datetime]]:
        """Yield ``(relative_path, time)`` for every file below ``path``.

        Raises StampPathNotFoundError immediately if ``path`` does not exist.
        """
        start = self.find_node(path)
        if start is None:
            raise StampPathNotFoundError(path)
        return self._iter_descendants(start, "")

    def _iter_descendants(self, index: int, node_path: str) -> Iterator[Tuple[str, datetime]]:
        for child in self.iter_children(index):
            name = self.get_name(child)
            child_path = f"{node_path}/{name}" if node_path else name
            node = self.nodes[child]
            if node.is_leaf:
                yield child_path, node.time
            else:
                yield from self._iter_descendants(child, child_path)


def import_stamps_from_binary_file(
    stamp_file: Union[str, Path], prefix: str, stamps: StampMap
) -> ImportResult:
    """Import every file stamp below ``prefix`` of a binary tree file.

    The whole subtree is read before ``stamps`` is touched.
    """
    tree = SerializedTree.load(stamp_file)
    entries = list(tree.get_creation_stamps_from_path(prefix))
    for path, stamp in entries:
        stamps[path] = stamp

    logger.debug("Imported %d stamps from %s under %r", len(entries), stamp_file, prefix)
    return ImportResult(imported=len(entries))
