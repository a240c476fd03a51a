"""Backup metadata, progress and restore result models."""

from typing import Literal, Optional

from pydantic import Field

from tradejournal.models.common import JournalModel

BackupPhase = Literal["scanning", "compressing", "finalizing", "complete"]

# Sidecar format version written into every metadata file.
METADATA_FORMAT_VERSION = "1.0.0"


class BackupMetadata(JournalModel):
    """Contents of the ``backup_<ts>.json`` sidecar."""

    id: str = Field(..., min_length=1, description="Backup ID")
    timestamp: str = Field(..., min_length=1, description="ISO-8601 creation time")
    size: int = Field(..., ge=0, description="Archive size in bytes")
    file_count: int = Field(..., ge=0, description="Number of archived files")
    version: str = Field(default=METADATA_FORMAT_VERSION, description="Format version")
    checksum: Optional[str] = Field(default=None, description="Reserved, never computed")


class BackupProgress(JournalModel):
    """A progress notification for create or restore."""

    phase: BackupPhase
    files_processed: int = 0
    total_files: int = 0
    bytes_processed: int = 0
    total_bytes: int = 0
    current_file: Optional[str] = None
    percentage: int = Field(default=0, ge=0, le=100)


class BackupValidation(JournalModel):
    """Result of validating a backup."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class BackupCreated(JournalModel):
    """Result of a successful backup."""

    backup_path: str
    metadata: BackupMetadata


class BackupsSize(JournalModel):
    """Aggregate size of all listed backups."""

    total_size: int
    backup_count: int


class FailedMove(JournalModel):
    """A top-level entry that could not be moved during restore."""

    entry: str
    error: str


class RestoreReport(JournalModel):
    """What a restore moved, and where the previous data went."""

    backup_id: str
    pre_restore_path: Optional[str] = None
    moved_aside: list[str] = Field(default_factory=list)
    restored: list[str] = Field(default_factory=list)
    failed: list[FailedMove] = Field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed)
