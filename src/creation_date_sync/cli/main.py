"""Command line interface for git-sync-creation-date."""

import sys
import time
import traceback
from typing import Optional

import click
from rich.markup import escape

from creation_date_sync import __version__
from creation_date_sync.config import SyncOptions
from creation_date_sync.core.applicator import apply_creation_stamps
from creation_date_sync.core.binary_tree import import_stamps_from_binary_file
from creation_date_sync.core.file_times import (
    NullCreationTimeSetter,
    get_creation_time_setter,
)
from creation_date_sync.core.history import import_stamps_from_commits
from creation_date_sync.core.repository import GitHistoryRepository
from creation_date_sync.core.stamp_map import StampMap
from creation_date_sync.core.text_importer import import_stamps_from_file
from creation_date_sync.errors import CreationDateSyncError
from creation_date_sync.logger import console, get_logger, setup_logging
from creation_date_sync.models import ApplyReport
from creation_date_sync.protocols import RepositoryHistoryProtocol

logger = get_logger(__name__)

BANNER = (
    "Scanning the repository and updating the File Creation attribute for committed "
    "files to match the dates files appeared in the commit history."
)


def _print_error(message: str) -> None:
    console.print(f"[red]ERROR: {escape(message)}[/red]", soft_wrap=True)


def _status_text(report: ApplyReport, final: bool = False) -> str:
    done = "[green]Done![/green] " if final else ""
    warnings_style = "yellow" if report.has_warnings else "default"
    return (
        f"Processing files... {done}[green]Processed: {report.processed}[/green] "
        f"[{warnings_style}]Warnings: {len(report.warnings)}[/{warnings_style}]"
    )


def _import_stamp_file(options: SyncOptions, stamps: StampMap) -> None:
    console.print("Importing creation time from file... ", end="")
    if options.creation_time_file is not None:
        result = import_stamps_from_file(
            options.creation_time_file, options.creation_time_file_root, stamps
        )
    else:
        result = import_stamps_from_binary_file(
            options.creation_time_bin_file, options.creation_time_file_root, stamps
        )
    skipped = f" Skipped {result.skipped} records." if result.skipped else ""
    console.print(f"[green]Done! Imported {result.imported} records.{skipped}[/green]")


def run_sync(options: SyncOptions, repository: RepositoryHistoryProtocol) -> ApplyReport:
    """Resolve creation stamps and apply them to the working tree."""
    setter = NullCreationTimeSetter() if options.dry_run else get_creation_time_setter()

    console.print(f"Current HEAD: {repository.head_description()}")
    stamps = StampMap()

    if options.stamp_file is not None:
        _import_stamp_file(options, stamps)

    initial_desc = (
        f" (initial commit time: {options.creation_time.isoformat()})"
        if options.creation_time is not None
        else ""
    )
    console.print(f"Collecting creation dates from commits{escape(initial_desc)}... ", end="")
    collected = import_stamps_from_commits(repository, stamps, options.creation_time)
    console.print(f"[green]Done! Collected {collected} new records.[/green]")

    console.print("Discovering files to process from the last commit... ", end="")
    files = repository.list_tracked_files()
    console.print("[green]Done![/green]")
    logger.debug("Found %d tracked files in %s", len(files), repository.working_dir)

    with console.status(_status_text(ApplyReport())) as status:
        report = apply_creation_stamps(
            stamps,
            files,
            repository.working_dir,
            setter,
            on_progress=lambda r: status.update(_status_text(r)),
        )
    console.print(_status_text(report, final=True))
    return report


def _print_warnings(report: ApplyReport) -> None:
    if not report.has_warnings:
        return
    console.print()
    console.print("[yellow]WARNINGS:[/yellow]")
    for warning in report.warnings:
        console.print(f"    [yellow]{escape(warning.message)}[/yellow]", soft_wrap=True)


@click.command()
@click.version_option(version=__version__)
@click.option(
    "--creation-time",
    help="Date and time to use for files that were committed in the first commit. "
    "Useful if repo was migrated from other place. "
    "Format: ISO date or date-time (e.g. 1994-02-13 or 1994-02-13T17:14:00). "
    "Default: use initial commit date and time.",
)
@click.option(
    "--creation-time-file",
    type=click.Path(dir_okay=False),
    help="Text file with creation times, one {relativePath}:{DateTime} pair per line.",
)
@click.option(
    "--creation-time-bin-file",
    type=click.Path(dir_okay=False),
    help="Binary (MessagePack) tree file with creation times. "
    "Cannot be combined with --creation-time-file.",
)
@click.option(
    "--creation-time-file-root",
    help="Path inside the creation time file that maps to the repository root. "
    "Required with a creation time file; use '/' to import everything.",
)
@click.option(
    "--repo",
    "repo_path",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory inside the repository (default: current directory)",
)
@click.option("--dry-run", is_flag=True, help="Resolve dates without changing any file")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def main(
    creation_time: Optional[str],
    creation_time_file: Optional[str],
    creation_time_bin_file: Optional[str],
    creation_time_file_root: Optional[str],
    repo_path: Optional[str],
    dry_run: bool,
    verbose: bool,
):
    """Update the File Creation attribute of committed files to match the
    dates the files appeared in the commit history."""
    setup_logging("DEBUG" if verbose else "WARNING")
    console.print(BANNER, style="bright_black")
    console.print()

    started = time.perf_counter()

    try:
        options = SyncOptions.build(
            creation_time=creation_time,
            creation_time_file=creation_time_file,
            creation_time_bin_file=creation_time_bin_file,
            creation_time_file_root=creation_time_file_root,
            repo_path=repo_path,
            dry_run=dry_run,
            verbose=verbose,
        )
        repository = GitHistoryRepository.discover(options.repo_path)
    except CreationDateSyncError as e:
        _print_error(str(e))
        sys.exit(1)

    try:
        with repository:
            report = run_sync(options, repository)
    except CreationDateSyncError as e:
        console.print()
        _print_error(str(e))
        sys.exit(1)
    except Exception:
        console.print()
        _print_error("Unexpected error happened\n" + traceback.format_exc())
        sys.exit(1)

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    console.print(f"Time elapsed: {elapsed_ms}ms")
    _print_warnings(report)


if __name__ == "__main__":
    main()
