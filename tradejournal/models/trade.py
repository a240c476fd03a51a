"""Trade data model."""

from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from tradejournal.models.common import JournalModel, Timestamp, UUIDStr

TradeType = Literal["long", "short"]
TradeOutcome = Literal["win", "loss", "breakeven"]
TradeStatus = Literal["planning", "open", "monitoring", "closed", "cancelled"]
TradeUpdateType = Literal[
    "note",
    "price_alert",
    "stop_loss_adjustment",
    "target_adjustment",
    "position_size_change",
    "exit_plan",
]

# Characters that would change the directory a trade file lands in.
UNSAFE_TICKER_CHARS = ("/", "\\", "\x00")


class ScreenshotAttachment(JournalModel):
    """A screenshot attached to a during-trade note."""

    id: UUIDStr = Field(..., description="Attachment ID")
    filename: str = Field(..., min_length=1, description="Original filename")
    path: str = Field(..., min_length=1, description="Stored path")
    description: Optional[str] = Field(default=None, description="Caption")
    uploaded_at: Timestamp = Field(..., description="Upload timestamp")
    file_size: int = Field(..., gt=0, description="Size in bytes")


class TradeNote(JournalModel):
    """A timestamped note taken while the trade is open."""

    id: UUIDStr = Field(..., description="Note ID")
    timestamp: Timestamp = Field(..., description="When the note applies")
    content: str = Field(..., min_length=1, description="Note text")
    price_at_time: Optional[float] = Field(
        default=None, gt=0, description="Price when the note was taken"
    )
    update_type: TradeUpdateType = Field(default="note", description="Kind of update")
    tags: list[str] = Field(default_factory=list, description="Free-text tags")
    screenshots: list[ScreenshotAttachment] = Field(
        default_factory=list, description="Attached screenshots"
    )
    is_important: bool = Field(default=False, description="Highlight flag")
    created_at: Timestamp = Field(..., description="Creation timestamp")


class PreTradeNotes(JournalModel):
    """The plan recorded before entering a trade."""

    thesis: str = Field(..., min_length=10, description="Why the trade is taken")
    risk_assessment: str = Field(..., min_length=10, description="What can go wrong")
    target_price: Optional[float] = Field(default=None, gt=0, description="Target price")
    stop_loss: Optional[float] = Field(default=None, gt=0, description="Stop loss price")
    position_size: Optional[float] = Field(default=None, gt=0, description="Position size")
    timeframe: Optional[str] = Field(default=None, description="Expected holding period")


class PostTradeNotes(JournalModel):
    """The review recorded after exiting a trade."""

    exit_reason: str = Field(..., min_length=5, description="Why the trade was closed")
    lessons_learned: str = Field(..., min_length=10, description="Takeaways")
    outcome: TradeOutcome = Field(..., description="Trade outcome")
    actual_exit_price: Optional[float] = Field(default=None, gt=0, description="Exit fill")
    profit_loss: Optional[float] = Field(default=None, description="Realized P&L")
    profit_loss_percentage: Optional[float] = Field(default=None, description="Realized P&L %")
    execution_quality: Optional[int] = Field(
        default=None, ge=1, le=10, description="Self-rated execution (1-10)"
    )
    emotional_state: Optional[str] = Field(default=None, description="Emotional state")


class Trade(JournalModel):
    """A journaled position."""

    id: UUIDStr = Field(..., description="Unique trade ID")
    ticker: str = Field(..., min_length=1, max_length=10, description="Ticker symbol")
    entry_date: Timestamp = Field(..., description="Entry timestamp")
    exit_date: Optional[Timestamp] = Field(default=None, description="Exit timestamp")
    trade_type: TradeType = Field(..., alias="type", description="Direction")
    status: TradeStatus = Field(default="planning", description="Lifecycle status")
    entry_price: Optional[float] = Field(default=None, gt=0, description="Entry price")
    exit_price: Optional[float] = Field(default=None, gt=0, description="Exit price")
    quantity: Optional[float] = Field(default=None, gt=0, description="Quantity")
    current_price: Optional[float] = Field(default=None, gt=0, description="Last price")
    unrealized_pnl: Optional[float] = Field(
        default=None, alias="unrealizedPnL", description="Unrealized P&L"
    )
    realized_pnl: Optional[float] = Field(
        default=None, alias="realizedPnL", description="Realized P&L"
    )
    pre_trade_notes: PreTradeNotes = Field(..., description="Pre-trade plan")
    during_trade_notes: list[TradeNote] = Field(
        default_factory=list, description="Notes taken during the trade"
    )
    post_trade_notes: Optional[PostTradeNotes] = Field(
        default=None, description="Post-trade review"
    )
    screenshots: list[str] = Field(default_factory=list, description="Screenshot paths")
    linked_thesis_id: Optional[UUIDStr] = Field(default=None, description="Linked thesis")
    tags: list[str] = Field(default_factory=list, description="Free-text tags")
    created_at: Timestamp = Field(..., description="Creation timestamp")
    updated_at: Timestamp = Field(..., description="Last update timestamp")

    @field_validator("ticker")
    @classmethod
    def _ticker_is_filename_safe(cls, value: str) -> str:
        if any(ch in value for ch in UNSAFE_TICKER_CHARS) or value in (".", ".."):
            raise ValueError("ticker must not contain path separators")
        return value

    @model_validator(mode="after")
    def _updated_after_created(self) -> "Trade":
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt must not be earlier than createdAt")
        return self

    @property
    def year(self) -> int:
        """Calendar year (UTC) of the entry date; selects the year bucket."""
        return self.entry_date.year

    @property
    def filename(self) -> str:
        """On-disk filename: ``{ticker}_{YYYYMMDD}_{id}.json``."""
        return f"{self.ticker}_{self.entry_date.strftime('%Y%m%d')}_{self.id}.json"
