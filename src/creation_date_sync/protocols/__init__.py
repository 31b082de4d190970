"""Protocol interfaces for the collaborators the sync engine depends on."""

from .file_times_protocol import CreationTimeSetterProtocol
from .repository_protocol import RepositoryHistoryProtocol

__all__ = ["CreationTimeSetterProtocol", "RepositoryHistoryProtocol"]
