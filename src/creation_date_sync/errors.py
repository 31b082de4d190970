"""Error types raised by git-sync-creation-date."""

from typing import Optional


class CreationDateSyncError(Exception):
    """Base class for all expected failures of a sync run."""


class ConfigurationError(CreationDateSyncError):
    """Command line options conflict or are incomplete."""


class RepositoryNotFoundError(CreationDateSyncError):
    """The starting directory is not part of a git working tree."""


class StampFileFormatError(CreationDateSyncError):
    """A text stamp file could not be parsed."""

    def __init__(self, line_number: int, reason: Optional[str] = None):
        self.line_number = line_number
        self.reason = reason
        message = (
            f"Wrong creation time file format. Error during parsing line {line_number}"
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BinaryStampFileError(CreationDateSyncError):
    """A binary stamp file does not have the expected structure."""


class StampPathNotFoundError(CreationDateSyncError):
    """A binary stamp tree has no directory at the requested prefix."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"Bin file does not contain directory by path: {prefix}")


class CreationTimeNotSupportedError(CreationDateSyncError):
    """The current platform cannot set file creation times."""
