"""Apply resolved creation stamps to files in the working tree."""

from datetime import timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

from creation_date_sync.core.stamp_map import StampMap
from creation_date_sync.logger import get_logger
from creation_date_sync.models import ApplyReport, FileWarning, WarningReason
from creation_date_sync.protocols import CreationTimeSetterProtocol

logger = get_logger(__name__)

STATUS_UPDATE_BATCH_SIZE = 20


def apply_creation_stamps(
    stamps: StampMap,
    files: Iterable[str],
    working_dir: Path,
    setter: CreationTimeSetterProtocol,
    on_progress: Optional[Callable[[ApplyReport], None]] = None,
) -> ApplyReport:
    """Set the creation time of each file to its stamp.

    Files without a stamp, or missing on disk, become warnings and are
    skipped. Errors from ``setter`` are not caught.
    """
    report = ApplyReport()
    working_dir = Path(working_dir)

    def notify() -> None:
        if on_progress is not None:
            on_progress(report)

    for relative_path in files:
        report.processed += 1

        creation_date = stamps.get(relative_path)
        if creation_date is None:
            report.warnings.append(
                FileWarning(path=relative_path, reason=WarningReason.MISSING_IN_HISTORY)
            )
            notify()
            continue

        absolute_path = working_dir / relative_path
        if not absolute_path.is_file():
            report.warnings.append(
                FileWarning(path=relative_path, reason=WarningReason.MISSING_ON_DISK)
            )
            notify()
            continue

        setter.set_creation_time(absolute_path, creation_date.astimezone(timezone.utc))
        report.updated += 1
        if report.processed % STATUS_UPDATE_BATCH_SIZE == 0:
            notify()

    notify()
    logger.debug(
        "Applied %d stamps with %d warnings", report.updated, len(report.warnings)
    )
    return report
