"""Error taxonomy for the trading journal.

Internal helpers raise these; public store and backup operations catch
them at the boundary (see ``tradejournal.db.envelope``) and return a
failed ``ApiResponse`` instead.
"""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError


class JournalError(Exception):
    """Base class for all journal errors."""


class ValidationError(JournalError):
    """Malformed or missing input. A caller bug; never retried."""


class NotFoundError(JournalError):
    """An ID does not resolve to a file."""


class ParseError(JournalError):
    """A file exists but is not valid JSON or fails the schema."""


class FilesystemError(JournalError):
    """Permission, disk-full or missing-parent failures."""

    def __init__(self, message: str, cause: Optional[OSError] = None):
        super().__init__(message)
        self.cause = cause

    @classmethod
    def from_os_error(cls, exc: OSError) -> "FilesystemError":
        message = exc.strerror or str(exc)
        if exc.filename:
            message = f"{message}: {exc.filename}"
        return cls(message, cause=exc)


class IntegrityError(JournalError):
    """Backup validation failed. Always carries the violated checks."""

    def __init__(self, errors: list[str], prefix: str = "Invalid backup"):
        self.errors = list(errors) or ["Unknown validation error"]
        super().__init__(f"{prefix}: {', '.join(self.errors)}")


class ConfigError(JournalError):
    """Configuration file could not be read or is invalid."""


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten a pydantic error into ``loc: message`` pairs."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "value"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)
