"""Summary projections used for list rendering."""

from typing import Optional

from pydantic import Field

from tradejournal.models.common import JournalModel, Timestamp
from tradejournal.models.thesis import MarketOutlook, Quarter, Thesis
from tradejournal.models.trade import Trade, TradeOutcome, TradeStatus, TradeType


class TradeSummary(JournalModel):
    """Reduced view of a Trade without the large text fields."""

    id: str
    ticker: str
    entry_date: Timestamp
    exit_date: Optional[Timestamp] = None
    trade_type: TradeType = Field(..., alias="type")
    status: TradeStatus
    outcome: Optional[TradeOutcome] = None
    profit_loss: Optional[float] = None
    linked_thesis_id: Optional[str] = None
    created_at: Timestamp
    updated_at: Timestamp

    @classmethod
    def from_trade(cls, trade: Trade) -> "TradeSummary":
        post = trade.post_trade_notes
        return cls(
            id=trade.id,
            ticker=trade.ticker,
            entry_date=trade.entry_date,
            exit_date=trade.exit_date,
            trade_type=trade.trade_type,
            status=trade.status,
            outcome=post.outcome if post else None,
            profit_loss=post.profit_loss if post else None,
            linked_thesis_id=trade.linked_thesis_id,
            created_at=trade.created_at,
            updated_at=trade.updated_at,
        )


class ThesisSummary(JournalModel):
    """Reduced view of a Thesis."""

    id: str
    title: str
    quarter: Quarter
    year: int
    market_outlook: MarketOutlook
    is_active: bool
    trade_count: int = Field(default=0, ge=0, description="Trades linked to this thesis")
    created_at: Timestamp
    updated_at: Timestamp

    @classmethod
    def from_thesis(cls, thesis: Thesis, trade_count: int = 0) -> "ThesisSummary":
        return cls(
            id=thesis.id,
            title=thesis.title,
            quarter=thesis.quarter,
            year=thesis.year,
            market_outlook=thesis.market_outlook,
            is_active=thesis.is_active,
            trade_count=trade_count,
            created_at=thesis.created_at,
            updated_at=thesis.updated_at,
        )
