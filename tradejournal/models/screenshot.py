"""Screenshot file listing model."""

from pydantic import Field

from tradejournal.models.common import JournalModel, Timestamp


class ScreenshotInfo(JournalModel):
    """A stored screenshot file."""

    path: str = Field(..., description="Path relative to the data directory")
    name: str = Field(..., description="File name")
    size: int = Field(..., ge=0, description="Size in bytes")
    created: Timestamp = Field(..., description="File modification time")
