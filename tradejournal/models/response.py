"""Uniform response envelope returned by every store and backup operation."""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from tradejournal.models.common import JournalModel, format_timestamp, utc_now

T = TypeVar("T")


def _now_iso() -> str:
    return format_timestamp(utc_now())


class ApiResponse(JournalModel, Generic[T]):
    """``{success, data?, error?, errorKind?, timestamp}``.

    Collaborators never see raw exceptions; failures carry a
    human-readable ``error`` prefixed by the attempted action and the
    name of the error class in ``error_kind``.
    """

    success: bool = Field(..., description="Whether the operation succeeded")
    data: Optional[T] = Field(default=None, description="Operation result")
    error: Optional[str] = Field(default=None, description="Failure message")
    error_kind: Optional[str] = Field(default=None, description="Error class name")
    timestamp: str = Field(default_factory=_now_iso, description="ISO-8601 response time")

    @classmethod
    def ok(cls, data: Any = None) -> "ApiResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: Optional[str] = None, data: Any = None) -> "ApiResponse":
        return cls(success=False, error=error, error_kind=kind, data=data)

    def to_json_dict(self) -> dict:
        payload = super().to_json_dict()
        if isinstance(self.data, BaseModel):
            payload["data"] = self.data.model_dump(mode="json", by_alias=True, exclude_none=True)
        elif isinstance(self.data, list):
            payload["data"] = [
                item.model_dump(mode="json", by_alias=True, exclude_none=True)
                if isinstance(item, BaseModel)
                else item
                for item in self.data
            ]
        return payload
