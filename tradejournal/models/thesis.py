"""Thesis data model."""

from typing import Annotated, Literal, Optional

from pydantic import Field, model_validator

from tradejournal.models.common import JournalModel, Timestamp, UUIDStr

Quarter = Literal["Q1", "Q2", "Q3", "Q4"]
MarketOutlook = Literal["bullish", "bearish", "neutral"]
QUARTERS = ("Q1", "Q2", "Q3", "Q4")

NonEmptyStr = Annotated[str, Field(min_length=1)]


class ThesisVersion(JournalModel):
    """One entry of a thesis' version history."""

    id: UUIDStr = Field(..., description="Version ID")
    version_number: int = Field(..., gt=0, description="Sequential version number")
    changes: str = Field(..., min_length=10, description="What changed")
    changed_by: Optional[str] = Field(default=None, description="Author of the change")
    timestamp: Timestamp = Field(..., description="When the change was made")
    previous_version: Optional[UUIDStr] = Field(default=None, description="Prior version ID")


class ThesisStrategies(JournalModel):
    """What to trade and what to stay away from."""

    focus: list[NonEmptyStr] = Field(..., min_length=1, description="Focus areas")
    avoid: list[NonEmptyStr] = Field(default_factory=list, description="Things to avoid")
    themes: list[NonEmptyStr] = Field(default_factory=list, description="Market themes")
    sectors: list[NonEmptyStr] = Field(default_factory=list, description="Sectors")


class RiskParameters(JournalModel):
    """Risk rules for the quarter."""

    max_position_size: float = Field(
        ..., gt=0, le=1, description="Max position size as a fraction of the portfolio"
    )
    stop_loss_rules: str = Field(..., min_length=10, description="Stop loss rules")
    diversification_rules: str = Field(..., min_length=10, description="Diversification rules")
    max_daily_loss: Optional[float] = Field(default=None, gt=0, description="Max daily loss")
    max_correlated_positions: Optional[float] = Field(
        default=None, gt=0, description="Max correlated positions"
    )
    risk_reward_ratio: Optional[float] = Field(default=None, gt=0, description="Min R:R")


class ThesisGoals(JournalModel):
    """Targets for the quarter."""

    profit_target: float = Field(..., gt=0, description="Profit target")
    trade_count: float = Field(..., gt=0, description="Planned number of trades")
    learning_objectives: list[Annotated[str, Field(min_length=5)]] = Field(
        ..., min_length=1, description="Learning objectives"
    )
    timeframe: Optional[str] = Field(default=None, description="Goal timeframe")
    win_rate_target: Optional[float] = Field(default=None, ge=0, le=1, description="Win rate")
    sharpe_ratio_target: Optional[float] = Field(default=None, description="Sharpe ratio")


class Thesis(JournalModel):
    """A quarterly strategy document."""

    id: UUIDStr = Field(..., description="Unique thesis ID")
    quarter: Quarter = Field(..., description="Quarter")
    year: int = Field(..., ge=2000, le=2100, description="Year")
    title: str = Field(..., min_length=5, description="Title")
    market_outlook: MarketOutlook = Field(..., description="Market outlook")
    strategies: ThesisStrategies = Field(..., description="Strategies")
    risk_parameters: RiskParameters = Field(..., description="Risk parameters")
    goals: ThesisGoals = Field(..., description="Goals")
    versions: list[ThesisVersion] = Field(default_factory=list, description="Version history")
    is_active: bool = Field(default=True, description="Active flag")
    created_at: Timestamp = Field(..., description="Creation timestamp")
    updated_at: Timestamp = Field(..., description="Last update timestamp")

    @model_validator(mode="after")
    def _updated_after_created(self) -> "Thesis":
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt must not be earlier than createdAt")
        return self

    @property
    def filename(self) -> str:
        """On-disk filename: ``{year}_{quarter}_{id}.json``."""
        return f"{self.year}_{self.quarter}_{self.id}.json"
