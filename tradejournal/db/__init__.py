"""Persistence layer: document store, backups and screenshots."""

from tradejournal.db.backup import BackupEngine
from tradejournal.db.screenshots import ScreenshotStore
from tradejournal.db.store import DocumentStore

__all__ = ["BackupEngine", "DocumentStore", "ScreenshotStore"]
