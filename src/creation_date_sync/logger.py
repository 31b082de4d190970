"""Logging setup backed by rich.

Status output meant for the user goes straight to ``console``; diagnostic
messages go through standard logging so ``--verbose`` can turn them on.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

console = Console()
error_console = Console(stderr=True)


def setup_logging(level: str = "WARNING") -> None:
    """Configure the root logger once at the CLI entry point.

    The ``LOG_LEVEL`` environment variable overrides ``level``.
    """
    level = os.getenv("LOG_LEVEL", level).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in [h for h in root_logger.handlers if isinstance(h, RichHandler)]:
        root_logger.removeHandler(handler)

    rich_handler = RichHandler(
        console=error_console,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(rich_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; handlers come from ``setup_logging``."""
    return logging.getLogger(name)
