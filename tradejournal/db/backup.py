"""Snapshot and restore of the journal data directory.

Backups live in ``data/backups`` as a ZIP archive plus a JSON metadata
sidecar with the same base name::

    data/backups/backup_<timestamp>.zip
    data/backups/backup_<timestamp>.json

Restore is not transactional. Live entries are first moved into a
``pre_restore_<ms>`` directory inside ``data/backups``, then the
extracted entries are moved in. If any move fails the restore reports
which entries made it and leaves the safety-net directory in place for
manual recovery; it is never moved back automatically.

A backup taken while a save is in progress may capture either version
of that file. There is no cross-file locking.
"""

import json
import logging
import os
import re
import shutil
import tempfile
import time
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from tradejournal.config import JournalConfig
from tradejournal.db.envelope import api_operation
from tradejournal.db.progress import ProgressDispatcher, ProgressSink
from tradejournal.errors import IntegrityError, ValidationError
from tradejournal.models import (
    ApiResponse,
    BackupCreated,
    BackupMetadata,
    BackupProgress,
    BackupsSize,
    BackupValidation,
    FailedMove,
    RestoreReport,
    format_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

BACKUPS_DIRNAME = "backups"
BACKUP_PREFIX = "backup_"
PRE_RESTORE_PREFIX = "pre_restore_"
TEMP_RESTORE_PREFIX = "temp_restore_"

REQUIRED_METADATA_FIELDS = ("id", "timestamp", "size", "fileCount")

BACKUP_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


# Data transfer fills the bar up to this point; finalizing is 95, complete 100.
TRANSFER_PERCENT_CAP = 90


def _percent(done: int, total: int, start: int = 0) -> int:
    span = TRANSFER_PERCENT_CAP - start
    if total <= 0:
        return TRANSFER_PERCENT_CAP
    return start + min(span, round(done * span / total))


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _path_safe_timestamp() -> str:
    return re.sub(r"[:.]", "-", format_timestamp(utc_now()))


class BackupEngine:
    """Create, list, validate, restore and delete data snapshots."""

    def __init__(self, config: JournalConfig):
        """Initialize the engine.

        Args:
            config: Journal configuration. Everything under ``config.data_dir``
                except the backups directory is archived.
        """
        self.config = config
        self.data_dir = config.data_dir
        self.backups_dir = config.backups_dir
        self.compression_level = config.compression_level

    # ==================== Create ====================

    @api_operation("create backup")
    def create_backup(self, on_progress: Optional[ProgressSink] = None) -> BackupCreated:
        """Archive the data directory.

        Phases are reported in order: scanning, compressing, finalizing,
        complete.

        Args:
            on_progress: Optional callback receiving ``BackupProgress`` events.

        Returns:
            The archive path and the metadata written to the sidecar.
        """
        self.backups_dir.mkdir(parents=True, exist_ok=True)
        backup_id = self._new_backup_id()
        archive_path = self._archive_path(backup_id)

        with ProgressDispatcher(on_progress) as progress:
            progress.emit(BackupProgress(phase="scanning"))
            files = self._scan_data_directory()
            total_files = len(files)
            total_bytes = sum(size for _, size in files)
            logger.info("Backing up %d files (%d bytes) to %s", total_files, total_bytes, archive_path)

            files_processed = 0
            bytes_processed = 0
            try:
                with zipfile.ZipFile(
                    archive_path,
                    "w",
                    compression=zipfile.ZIP_DEFLATED,
                    compresslevel=self.compression_level,
                ) as archive:
                    for path, size in files:
                        arcname = path.relative_to(self.data_dir).as_posix()
                        archive.write(path, arcname)
                        files_processed += 1
                        bytes_processed += size
                        progress.emit(BackupProgress(
                            phase="compressing",
                            files_processed=files_processed,
                            total_files=total_files,
                            bytes_processed=bytes_processed,
                            total_bytes=total_bytes,
                            current_file=arcname,
                            percentage=_percent(bytes_processed, total_bytes),
                        ))

                    progress.emit(BackupProgress(
                        phase="finalizing",
                        files_processed=total_files,
                        total_files=total_files,
                        bytes_processed=total_bytes,
                        total_bytes=total_bytes,
                        percentage=95,
                    ))
            except Exception:
                archive_path.unlink(missing_ok=True)
                raise

            metadata = BackupMetadata(
                id=backup_id,
                timestamp=format_timestamp(utc_now()),
                size=archive_path.stat().st_size,
                file_count=total_files,
            )
            self._metadata_path(backup_id).write_text(
                json.dumps(metadata.to_json_dict(), indent=2), encoding="utf-8"
            )

            progress.emit(BackupProgress(
                phase="complete",
                files_processed=total_files,
                total_files=total_files,
                bytes_processed=total_bytes,
                total_bytes=total_bytes,
                percentage=100,
            ))

        logger.info("Created backup %s (%d bytes)", backup_id, metadata.size)
        return BackupCreated(backup_path=str(archive_path), metadata=metadata)

    def _new_backup_id(self) -> str:
        while True:
            backup_id = f"{BACKUP_PREFIX}{_path_safe_timestamp()}"
            if not (
                self._archive_path(backup_id).exists()
                or self._metadata_path(backup_id).exists()
            ):
                return backup_id
            time.sleep(0.001)

    def _scan_data_directory(self) -> list[tuple[Path, int]]:
        """List every file under the data directory except the backups tree."""
        files = []
        for root, dirs, filenames in os.walk(self.data_dir):
            root_path = Path(root)
            if root_path == self.data_dir and BACKUPS_DIRNAME in dirs:
                dirs.remove(BACKUPS_DIRNAME)
            dirs.sort()
            for name in sorted(filenames):
                path = root_path / name
                try:
                    if not path.is_file():
                        continue
                    files.append((path, path.stat().st_size))
                except OSError as e:
                    logger.warning("Skipping unreadable file %s: %s", path, e)
        return files

    # ==================== List / size ====================

    @api_operation("list backups")
    def list_backups(self) -> list[BackupMetadata]:
        """List backups whose archive still exists, newest first."""
        return self._list_backups()

    def _list_backups(self) -> list[BackupMetadata]:
        self.backups_dir.mkdir(parents=True, exist_ok=True)
        entries: list[tuple[datetime, BackupMetadata]] = []
        skipped = 0
        for sidecar in sorted(self.backups_dir.glob(f"{BACKUP_PREFIX}*.json")):
            try:
                metadata = BackupMetadata.model_validate_json(sidecar.read_text(encoding="utf-8"))
                created = _parse_timestamp(metadata.timestamp)
            except (OSError, ValueError) as e:
                skipped += 1
                logger.debug("Skipping unreadable sidecar %s: %s", sidecar, e)
                continue
            if not sidecar.with_suffix(".zip").exists():
                skipped += 1
                logger.debug("Skipping %s: archive is missing", sidecar.name)
                continue
            entries.append((created, metadata))

        if skipped:
            logger.warning("Skipped %d incomplete or unreadable backup(s)", skipped)
        entries.sort(key=lambda entry: entry[0], reverse=True)
        return [metadata for _, metadata in entries]

    @api_operation("calculate backups size")
    def get_backups_size(self) -> BackupsSize:
        """Total archive size and count over all listed backups."""
        backups = self._list_backups()
        return BackupsSize(
            total_size=sum(backup.size for backup in backups),
            backup_count=len(backups),
        )

    # ==================== Validate ====================

    @api_operation("validate backup")
    def validate_backup(self, backup_id: Any) -> BackupValidation:
        """Check that a backup is complete and its size matches the sidecar.

        The archive's contents are not inspected. An invalid backup is a
        successful response carrying ``is_valid=False`` and the errors.
        """
        self._check_backup_id(backup_id)
        return self._validate(backup_id)

    def _validate(self, backup_id: str) -> BackupValidation:
        archive_path = self._archive_path(backup_id)
        metadata_path = self._metadata_path(backup_id)

        errors = []
        if not archive_path.exists():
            errors.append("Backup file not found")
        if not metadata_path.exists():
            errors.append("Metadata file not found")
        if errors:
            return BackupValidation(is_valid=False, errors=errors)

        try:
            raw = json.loads(metadata_path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("metadata is not a JSON object")
            if any(raw.get(field) is None for field in REQUIRED_METADATA_FIELDS):
                errors.append("Invalid metadata structure")
            if archive_path.stat().st_size != raw.get("size"):
                errors.append("Backup file size mismatch")
        except (OSError, ValueError) as e:
            logger.debug("Could not validate %s: %s", metadata_path, e)
            errors.append("Failed to validate metadata")

        return BackupValidation(is_valid=not errors, errors=errors)

    # ==================== Restore ====================

    @api_operation("restore backup")
    def restore_backup(
        self, backup_id: Any, on_progress: Optional[ProgressSink] = None
    ) -> RestoreReport:
        """Replace the live data with the contents of a backup.

        Nothing on disk is touched unless the backup validates. The
        previous data is moved to ``backups/pre_restore_<ms>``.

        Args:
            backup_id: ID of the backup to restore.
            on_progress: Optional callback receiving ``BackupProgress`` events.

        Returns:
            A report of what was moved where. A partial restore is returned
            as a failed response carrying the report.
        """
        self._check_backup_id(backup_id)
        validation = self._validate(backup_id)
        if not validation.is_valid:
            raise IntegrityError(validation.errors)

        archive_path = self._archive_path(backup_id)
        with ProgressDispatcher(on_progress) as progress:
            temp_dir = Path(tempfile.mkdtemp(prefix=TEMP_RESTORE_PREFIX, dir=self.backups_dir))
            try:
                self._extract(archive_path, temp_dir, progress)
                report = self._swap_in(backup_id, temp_dir, progress)
            finally:
                shutil.rmtree(temp_dir, ignore_errors=True)

            if report.is_partial:
                logger.warning(
                    "Partial restore of %s: %d entries failed; previous data kept in %s",
                    backup_id,
                    len(report.failed),
                    report.pre_restore_path,
                )
                return ApiResponse.fail(
                    f"Failed to restore backup: {self._partial_restore_message(report)}",
                    kind="FilesystemError",
                    data=report,
                )

            progress.emit(BackupProgress(phase="complete", percentage=100))

        logger.info("Restored backup %s; previous data in %s", backup_id, report.pre_restore_path)
        return report

    def _extract(self, archive_path: Path, temp_dir: Path, progress: ProgressDispatcher) -> None:
        try:
            with zipfile.ZipFile(archive_path) as archive:
                members = archive.infolist()
                total_files = len(members)
                total_bytes = sum(member.file_size for member in members)
                progress.emit(BackupProgress(
                    phase="scanning",
                    total_files=total_files,
                    total_bytes=total_bytes,
                    percentage=5,
                ))

                root = temp_dir.resolve()
                for member in members:
                    target = (root / member.filename).resolve()
                    if target != root and root not in target.parents:
                        raise IntegrityError([f"Unsafe archive entry: {member.filename}"])

                files_processed = 0
                bytes_processed = 0
                for member in members:
                    archive.extract(member, temp_dir)
                    files_processed += 1
                    bytes_processed += member.file_size
                    progress.emit(BackupProgress(
                        phase="compressing",
                        files_processed=files_processed,
                        total_files=total_files,
                        bytes_processed=bytes_processed,
                        total_bytes=total_bytes,
                        current_file=member.filename,
                        percentage=_percent(bytes_processed, total_bytes, start=5),
                    ))
        except zipfile.BadZipFile as e:
            raise IntegrityError([f"Corrupted archive: {e}"], prefix="Could not extract backup") from e

    def _swap_in(
        self, backup_id: str, temp_dir: Path, progress: ProgressDispatcher
    ) -> RestoreReport:
        """Move live entries aside, then move extracted entries in.

        Every entry is moved on its own; a failure is recorded and the
        remaining entries are still processed.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        pre_restore = self._new_pre_restore_dir()

        moved_aside: list[str] = []
        restored: list[str] = []
        failed: list[FailedMove] = []

        for entry in sorted(self.data_dir.iterdir()):
            if entry.name == BACKUPS_DIRNAME:
                continue
            try:
                shutil.move(str(entry), str(pre_restore / entry.name))
                moved_aside.append(entry.name)
            except OSError as e:
                logger.warning("Could not move %s aside: %s", entry.name, e)
                failed.append(FailedMove(entry=entry.name, error=str(e)))

        progress.emit(BackupProgress(phase="finalizing", percentage=95))

        for entry in sorted(temp_dir.iterdir()):
            if entry.name == BACKUPS_DIRNAME:
                logger.warning("Ignoring %s directory inside backup %s", BACKUPS_DIRNAME, backup_id)
                continue
            target = self.data_dir / entry.name
            if target.exists():
                failed.append(FailedMove(entry=entry.name, error="Destination already exists"))
                continue
            try:
                shutil.move(str(entry), str(target))
                restored.append(entry.name)
            except OSError as e:
                logger.warning("Could not restore %s: %s", entry.name, e)
                failed.append(FailedMove(entry=entry.name, error=str(e)))

        return RestoreReport(
            backup_id=backup_id,
            pre_restore_path=str(pre_restore),
            moved_aside=moved_aside,
            restored=restored,
            failed=failed,
        )

    def _new_pre_restore_dir(self) -> Path:
        while True:
            path = self.backups_dir / f"{PRE_RESTORE_PREFIX}{int(time.time() * 1000)}"
            try:
                path.mkdir()
                return path
            except FileExistsError:
                time.sleep(0.001)

    @staticmethod
    def _partial_restore_message(report: RestoreReport) -> str:
        restored = ", ".join(report.restored) or "none"
        failed = ", ".join(f"{f.entry} ({f.error})" for f in report.failed)
        return (
            f"partial restore; restored: {restored}; failed: {failed}; "
            f"previous data kept in {report.pre_restore_path}"
        )

    # ==================== Delete ====================

    @api_operation("delete backup")
    def delete_backup(self, backup_id: Any) -> None:
        """Remove a backup's archive and sidecar, whichever exist."""
        self._check_backup_id(backup_id)
        self._archive_path(backup_id).unlink(missing_ok=True)
        self._metadata_path(backup_id).unlink(missing_ok=True)
        logger.info("Deleted backup %s", backup_id)

    # ==================== Helpers ====================

    def _archive_path(self, backup_id: str) -> Path:
        return self.backups_dir / f"{backup_id}.zip"

    def _metadata_path(self, backup_id: str) -> Path:
        return self.backups_dir / f"{backup_id}.json"

    @staticmethod
    def _check_backup_id(backup_id: Any) -> None:
        if not isinstance(backup_id, str) or not BACKUP_ID_PATTERN.match(backup_id):
            raise ValidationError("Invalid backup ID provided")
