"""Import creation stamps from a ``path:timestamp`` text file."""

from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from creation_date_sync.core.stamp_map import StampMap, fold_case, normalize_path
from creation_date_sync.errors import StampFileFormatError
from creation_date_sync.logger import get_logger
from creation_date_sync.models import ImportResult

logger = get_logger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or date-time into an offset-aware datetime.

    Values without an offset are taken to be in the local time zone.
    """
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def normalize_prefix(prefix: str) -> Optional[str]:
    """Turn a user-supplied prefix into a ``dir/`` form, or None for the root."""
    prefix = normalize_path(prefix)
    if prefix in ("", "/"):
        return None
    if not prefix.endswith("/"):
        prefix += "/"
    return prefix


def parse_stamp_line(line: str) -> Tuple[str, datetime]:
    """Split a ``path:timestamp`` record on its first colon."""
    path, separator, stamp = line.partition(":")
    path = path.strip()
    if not separator:
        raise ValueError("missing ':' separator")
    if not path:
        raise ValueError("empty path")
    return path, parse_timestamp(stamp)


def import_stamps_from_lines(
    lines: Iterable[str], prefix: str, stamps: StampMap
) -> ImportResult:
    """Import ``path:timestamp`` records under ``prefix`` into ``stamps``.

    Nothing is written to ``stamps`` unless every record parses.
    """
    scope = normalize_prefix(prefix)
    scope_folded = fold_case(scope) if scope else None
    staged: Dict[str, Tuple[str, datetime]] = {}
    result = ImportResult()

    for line_number, raw_line in enumerate(lines):
        line = normalize_path(raw_line.rstrip("\r\n"))
        if not line.strip():
            continue

        if scope is not None:
            if fold_case(line[: len(scope)]) != scope_folded:
                result.skipped += 1
                continue
            line = line[len(scope):]

        try:
            path, stamp = parse_stamp_line(line)
        except ValueError as e:
            raise StampFileFormatError(line_number, str(e)) from e

        staged[fold_case(path)] = (path, stamp)
        result.imported += 1

    for path, stamp in staged.values():
        stamps[path] = stamp

    logger.debug(
        "Imported %d stamps, skipped %d outside prefix %r",
        result.imported,
        result.skipped,
        prefix,
    )
    return result


def import_stamps_from_file(
    stamp_file: Path, prefix: str, stamps: StampMap
) -> ImportResult:
    """Import a UTF-8 text stamp file."""
    with open(stamp_file, encoding="utf-8-sig") as f:
        return import_stamps_from_lines(f, prefix, stamps)
