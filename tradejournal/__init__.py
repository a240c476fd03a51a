"""Trading journal: file-based trade and thesis store with backups."""

__version__ = "1.0.0"
