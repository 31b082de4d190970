"""Run options for a sync, validated before anything is touched."""

from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from creation_date_sync.core.text_importer import parse_timestamp
from creation_date_sync.errors import ConfigurationError


class SyncOptions(BaseModel):
    """Options collected from the command line."""

    creation_time: Optional[datetime] = None
    creation_time_file: Optional[Path] = None
    creation_time_bin_file: Optional[Path] = None
    creation_time_file_root: Optional[str] = None
    repo_path: Optional[Path] = None
    dry_run: bool = False
    verbose: bool = False

    @field_validator("creation_time", mode="before")
    @classmethod
    def _parse_creation_time(cls, value):
        if isinstance(value, str):
            return parse_timestamp(value)
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.astimezone()
        return value

    @model_validator(mode="after")
    def _check_stamp_files(self) -> "SyncOptions":
        if self.creation_time_file and self.creation_time_bin_file:
            raise ValueError(
                "--creation-time-file and --creation-time-bin-file cannot be used together"
            )
        stamp_file = self.stamp_file
        if stamp_file is not None:
            if not self.creation_time_file_root:
                raise ValueError(
                    "--creation-time-file-root is required when a creation time file is given"
                )
            if not stamp_file.is_file():
                raise ValueError(f"Creation time file not found: {stamp_file}")
        return self

    @property
    def stamp_file(self) -> Optional[Path]:
        return self.creation_time_file or self.creation_time_bin_file

    @classmethod
    def build(cls, **values) -> "SyncOptions":
        """Validate options, raising ConfigurationError on any problem."""
        try:
            return cls(**values)
        except ValidationError as e:
            messages = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
            raise ConfigurationError(messages) from e
