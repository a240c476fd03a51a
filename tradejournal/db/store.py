"""File-based document store for trades and theses.

Each entity is one JSON file under the data directory::

    data/trades/<year>/<TICKER>_<YYYYMMDD>_<id>.json
    data/theses/<year>_<quarter>_<id>.json

There is no locking. A listing that runs while a save is in progress may
see the old or the new file for that entity.
"""

import json
import logging
import re
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from tradejournal.config import JournalConfig
from tradejournal.db.envelope import api_operation
from tradejournal.errors import (
    NotFoundError,
    ParseError,
    ValidationError,
    describe_validation_error,
)
from tradejournal.models import Thesis, ThesisSummary, Trade, TradeSummary, utc_now
from tradejournal.models.thesis import QUARTERS

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=BaseModel)

# IDs are interpolated into glob patterns, so only allow plain characters.
ENTITY_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")


@dataclass
class ScanOutcome:
    """Result of reading one file during a listing."""

    path: Path
    entity: Optional[BaseModel] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.entity is not None


class DocumentStore:
    """One-file-per-entity store for trades and theses."""

    def __init__(self, config: JournalConfig):
        """Initialize the store.

        Args:
            config: Journal configuration; ``config.data_dir`` is the root.
        """
        self.config = config
        self.data_dir = config.data_dir
        self.trades_dir = config.trades_dir
        self.theses_dir = config.theses_dir
        self.backups_dir = config.backups_dir

    # ==================== Layout ====================

    @api_operation("create data directories")
    def ensure_layout(self) -> None:
        """Create the data directory tree if it is missing."""
        self._ensure_layout()

    def _ensure_layout(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for directory in (self.trades_dir, self.theses_dir, self.backups_dir):
            directory.mkdir(exist_ok=True)
        (self.trades_dir / str(utc_now().year)).mkdir(exist_ok=True)

    # ==================== Trades ====================

    @api_operation("save trade")
    def save_trade(self, trade: Any) -> str:
        """Validate and write a trade, overwriting any previous version.

        Args:
            trade: A ``Trade`` or a mapping in the on-disk JSON form.

        Returns:
            The trade ID.
        """
        trade = self._coerce(trade, Trade, "trade")
        self._ensure_layout()

        year_dir = self.trades_dir / str(trade.year)
        year_dir.mkdir(exist_ok=True)
        path = year_dir / trade.filename
        self._write_entity(path, trade)
        self._remove_stale(self._find_trade_files(trade.id), keep=path)

        logger.info("Saved trade %s to %s", trade.id, path)
        return trade.id

    @api_operation("load trade")
    def load_trade(self, trade_id: Any) -> Trade:
        """Load a trade by ID."""
        self._check_id(trade_id, "trade")
        path = self._first_match(self._find_trade_files(trade_id), "Trade")
        return self._read_entity(path, Trade, "trade")

    @api_operation("list trades")
    def list_trades(self) -> list[TradeSummary]:
        """List summaries of every readable trade, newest first.

        Files that cannot be read, parsed or validated are skipped.
        """
        self._ensure_layout()
        outcomes = self._scan(sorted(self.trades_dir.glob("*/*.json")), Trade, "trade")
        summaries = [TradeSummary.from_trade(o.entity) for o in outcomes if o.ok]
        summaries.sort(key=lambda s: s.created_at, reverse=True)
        return summaries

    @api_operation("delete trade")
    def delete_trade(self, trade_id: Any) -> str:
        """Delete a trade file. Screenshots and linked theses are left alone."""
        self._check_id(trade_id, "trade")
        path = self._first_match(self._find_trade_files(trade_id), "Trade")
        path.unlink()
        logger.info("Deleted trade %s (%s)", trade_id, path.name)
        return trade_id

    def _find_trade_files(self, trade_id: str) -> list[Path]:
        return sorted(self.trades_dir.glob(f"*/*_{trade_id}.json"))

    # ==================== Theses ====================

    @api_operation("save thesis")
    def save_thesis(self, thesis: Any) -> str:
        """Validate and write a thesis, overwriting any previous version.

        Args:
            thesis: A ``Thesis`` or a mapping in the on-disk JSON form.

        Returns:
            The thesis ID.
        """
        thesis = self._coerce(thesis, Thesis, "thesis")
        self._ensure_layout()

        path = self.theses_dir / thesis.filename
        self._write_entity(path, thesis)
        self._remove_stale(self._find_thesis_files(thesis.id), keep=path)

        logger.info("Saved thesis %s to %s", thesis.id, path)
        return thesis.id

    @api_operation("load thesis")
    def load_thesis(self, thesis_id: Any) -> Thesis:
        """Load a thesis by ID."""
        self._check_id(thesis_id, "thesis")
        path = self._first_match(self._find_thesis_files(thesis_id), "Thesis")
        return self._read_entity(path, Thesis, "thesis")

    @api_operation("list theses")
    def list_theses(self) -> list[ThesisSummary]:
        """List summaries of every readable thesis, newest first.

        ``trade_count`` counts the readable trades linked to each thesis.
        """
        self._ensure_layout()
        outcomes = self._scan(sorted(self.theses_dir.glob("*.json")), Thesis, "thesis")
        trade_counts = self._linked_trade_counts()
        summaries = [
            ThesisSummary.from_thesis(o.entity, trade_counts.get(o.entity.id, 0))
            for o in outcomes
            if o.ok
        ]
        summaries.sort(key=lambda s: s.created_at, reverse=True)
        return summaries

    @api_operation("delete thesis")
    def delete_thesis(self, thesis_id: Any) -> str:
        """Delete a thesis file. Linked trades keep their reference."""
        self._check_id(thesis_id, "thesis")
        path = self._first_match(self._find_thesis_files(thesis_id), "Thesis")
        path.unlink()
        logger.info("Deleted thesis %s (%s)", thesis_id, path.name)
        return thesis_id

    @api_operation("get active thesis")
    def get_active_thesis(self, year: Any, quarter: Any) -> Optional[Thesis]:
        """Get the active thesis for a quarter.

        Args:
            year: Calendar year.
            quarter: One of ``Q1``..``Q4``.

        Returns:
            The most recently updated active thesis, or None.
        """
        if isinstance(year, bool) or not isinstance(year, int):
            raise ValidationError("Invalid year provided")
        if quarter not in QUARTERS:
            raise ValidationError("Invalid quarter provided")

        self._ensure_layout()
        paths = sorted(self.theses_dir.glob(f"{year}_{quarter}_*.json"))
        candidates = [
            o.entity
            for o in self._scan(paths, Thesis, "thesis")
            if o.ok
            and o.entity.is_active
            and o.entity.year == year
            and o.entity.quarter == quarter
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda t: t.updated_at)

    def _find_thesis_files(self, thesis_id: str) -> list[Path]:
        return sorted(self.theses_dir.glob(f"*_{thesis_id}.json"))

    def _linked_trade_counts(self) -> Counter:
        counts: Counter = Counter()
        for outcome in self._scan(sorted(self.trades_dir.glob("*/*.json")), Trade, "trade"):
            if outcome.ok and outcome.entity.linked_thesis_id:
                counts[outcome.entity.linked_thesis_id] += 1
        return counts

    # ==================== Helpers ====================

    @staticmethod
    def _coerce(value: Any, model: type[EntityT], label: str) -> EntityT:
        """Validate untrusted input into a model instance."""
        if isinstance(value, model):
            value = value.model_dump(by_alias=True)
        elif not isinstance(value, Mapping):
            raise ValidationError(f"Invalid {label} data provided")
        try:
            return model.model_validate(value)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {label} data: {describe_validation_error(e)}"
            ) from e

    @staticmethod
    def _check_id(entity_id: Any, label: str) -> None:
        if not isinstance(entity_id, str) or not ENTITY_ID_PATTERN.match(entity_id):
            raise ValidationError(f"Invalid {label} ID provided")

    @staticmethod
    def _first_match(paths: list[Path], label: str) -> Path:
        if not paths:
            raise NotFoundError(f"{label} not found")
        return paths[0]

    @staticmethod
    def _write_entity(path: Path, entity: BaseModel) -> None:
        path.write_text(
            json.dumps(entity.to_json_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    @staticmethod
    def _remove_stale(paths: list[Path], keep: Path) -> None:
        """Remove files left by an earlier save under a different name."""
        for path in paths:
            if path != keep:
                path.unlink(missing_ok=True)
                logger.info("Removed stale file %s", path)

    @staticmethod
    def _read_entity(path: Path, model: type[EntityT], label: str) -> EntityT:
        """Read, parse and validate one entity file.

        Raises:
            ParseError: If the file is not valid JSON or fails the schema.
            OSError: If the file cannot be read.
        """
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Failed to parse {label} file - corrupted JSON") from e
        if not isinstance(raw, Mapping):
            raise ParseError(f"Invalid {label} data in file: not a JSON object")
        try:
            return model.model_validate(raw)
        except PydanticValidationError as e:
            raise ParseError(
                f"Invalid {label} data in file: {describe_validation_error(e)}"
            ) from e

    def _scan(self, paths: list[Path], model: type[EntityT], label: str) -> list[ScanOutcome]:
        """Read every path, recording a per-file outcome instead of raising."""
        outcomes = []
        for path in paths:
            try:
                entity = self._read_entity(path, model, label)
            except (ParseError, OSError) as e:
                outcomes.append(ScanOutcome(path=path, error=str(e)))
            else:
                outcomes.append(ScanOutcome(path=path, entity=entity))

        skipped = [o for o in outcomes if not o.ok]
        if skipped:
            logger.warning("Skipped %d unreadable %s file(s)", len(skipped), label)
            for outcome in skipped:
                logger.debug("Skipped %s: %s", outcome.path, outcome.error)
        return outcomes
