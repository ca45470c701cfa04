"""Defines the core data models and protocols for the updater."""

from enum import Enum
from typing import Optional, Protocol

import aiohttp
from pydantic import BaseModel, ConfigDict, Field

from .version import Version

# --- Enums ---


class UpdateStatus(str, Enum):
    """Status codes for the update process."""
    IDLE = "idle"
    CHECKING = "checking"
    UP_TO_DATE = "up_to_date"
    UPDATE_AVAILABLE = "update_available"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    FAILED = "failed"

# --- Protocols ---


class ProgressCallback(Protocol):
    """Protocol for progress callback functions."""

    async def __call__(self, status: UpdateStatus,
                       progress: float, message: str) -> None: ...


class ReleaseStrategy(Protocol):
    """Protocol for strategies that list the releases published upstream."""

    async def fetch_versions(
        self, session: aiohttp.ClientSession) -> list[Version]: ...

# --- Persistent state ---


class ConfigRecord(BaseModel):
    """The last successful install: which version, and where."""

    model_config = ConfigDict(validate_assignment=True)

    version: Version = Field(default_factory=Version.zero)
    dest_dir: str = Field(min_length=1)

    @classmethod
    def first_run(cls, dest_dir: str) -> "ConfigRecord":
        return cls(version=Version.zero(), dest_dir=dest_dir)

    def with_install(self, version: Version,
                     dest_dir: Optional[str] = None) -> "ConfigRecord":
        """Return the record describing a completed install."""
        return self.model_copy(update={
            "version": version,
            "dest_dir": dest_dir if dest_dir is not None else self.dest_dir,
        })
