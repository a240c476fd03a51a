"""Data models for the trading journal."""

from tradejournal.models.backup import (
    BackupCreated,
    BackupMetadata,
    BackupProgress,
    BackupsSize,
    BackupValidation,
    FailedMove,
    RestoreReport,
)
from tradejournal.models.common import format_timestamp, new_id, utc_now
from tradejournal.models.response import ApiResponse
from tradejournal.models.screenshot import ScreenshotInfo
from tradejournal.models.summary import ThesisSummary, TradeSummary
from tradejournal.models.thesis import (
    RiskParameters,
    Thesis,
    ThesisGoals,
    ThesisStrategies,
    ThesisVersion,
)
from tradejournal.models.trade import (
    PostTradeNotes,
    PreTradeNotes,
    ScreenshotAttachment,
    Trade,
    TradeNote,
)

__all__ = [
    "ApiResponse",
    "BackupCreated",
    "BackupMetadata",
    "BackupProgress",
    "BackupsSize",
    "BackupValidation",
    "FailedMove",
    "PostTradeNotes",
    "PreTradeNotes",
    "RestoreReport",
    "RiskParameters",
    "ScreenshotAttachment",
    "ScreenshotInfo",
    "Thesis",
    "ThesisGoals",
    "ThesisStrategies",
    "ThesisSummary",
    "ThesisVersion",
    "Trade",
    "TradeNote",
    "TradeSummary",
    "format_timestamp",
    "new_id",
    "utc_now",
]
