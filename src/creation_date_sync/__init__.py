"""Sync file creation times with the dates files first appeared in git history."""

__version__ = "0.1.0"
