"""Shared field types and base model for journal entities."""

import re
import uuid
from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel


def _normalize_timestamp(value: datetime) -> datetime:
    """Convert to UTC and truncate to millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with milliseconds.

    Example: ``2025-01-24T10:30:00.000Z``.
    """
    value = _normalize_timestamp(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    """Current time as a normalized UTC datetime."""
    return _normalize_timestamp(datetime.now(timezone.utc))


# Hyphenated 8-4-4-4-12 form only; braces, urn: prefixes and bare hex are refused.
_CANONICAL_UUID = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


def _check_uuid(value: str) -> str:
    if not _CANONICAL_UUID.fullmatch(value):
        raise ValueError("must be a canonical UUID string")
    return value


Timestamp = Annotated[
    datetime,
    AfterValidator(_normalize_timestamp),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]

UUIDStr = Annotated[str, AfterValidator(_check_uuid)]


def new_id() -> str:
    """Generate a new entity ID."""
    return str(uuid.uuid4())


class JournalModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }

    def to_json_dict(self) -> dict:
        """Serialize to the on-disk JSON form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
