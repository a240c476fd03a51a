"""Property-based tests for the journal data models.

**Feature: trading-journal**
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from factories import (
    THESIS_ID,
    TRADE_ID,
    make_minimal_trade_data,
    make_thesis_data,
    make_trade_data,
    trade_payloads,
)
from tradejournal.models import (
    ApiResponse,
    BackupMetadata,
    RestoreReport,
    Thesis,
    ThesisSummary,
    Trade,
    TradeSummary,
    format_timestamp,
)
from tradejournal.models.backup import FailedMove


class TestTradeValidation:
    """
    **Feature: trading-journal, Property 1: Trade Schema Validation**

    *For any* trade payload, validation accepts exactly the documents that
    satisfy the field constraints.
    """

    def test_full_example_is_valid(self):
        trade = Trade.model_validate(make_trade_data())

        assert trade.id == TRADE_ID
        assert trade.ticker == "AAPL"
        assert trade.trade_type == "long"
        assert trade.pre_trade_notes.target_price == 200
        assert trade.during_trade_notes[0].tags == ["technical", "breakout"]
        assert trade.post_trade_notes.outcome == "win"
        assert trade.linked_thesis_id == THESIS_ID

    def test_minimal_trade_gets_defaults(self):
        trade = Trade.model_validate(make_minimal_trade_data())

        assert trade.status == "planning"
        assert trade.during_trade_notes == []
        assert trade.screenshots == []
        assert trade.tags == []
        assert trade.post_trade_notes is None

    @pytest.mark.parametrize("ticker", ["", "ABCDEFGHIJK", "A/B", "A\\B", ".", ".."])
    def test_bad_ticker_rejected(self, ticker: str):
        with pytest.raises(ValidationError):
            Trade.model_validate(make_trade_data(ticker=ticker))

    def test_unknown_trade_type_rejected(self):
        with pytest.raises(ValidationError):
            Trade.model_validate(make_trade_data(type="sideways"))

    def test_non_uuid_id_rejected(self):
        with pytest.raises(ValidationError):
            Trade.model_validate(make_trade_data(id="not-a-uuid"))

    @pytest.mark.parametrize(
        "trade_id",
        [
            "{a1b2c3d4-e5f6-4890-9bcd-ef1234567890}",
            "urn:uuid:a1b2c3d4-e5f6-4890-9bcd-ef1234567890",
            "a1b2c3d4e5f648909bcdef1234567890",
            "a1b2c3d4-e5f6-4890-9bcd-ef1234567890\n",
        ],
    )
    def test_non_canonical_uuid_rejected(self, trade_id: str):
        with pytest.raises(ValidationError):
            Trade.model_validate(make_trade_data(id=trade_id))

    def test_non_canonical_thesis_id_rejected(self):
        with pytest.raises(ValidationError):
            Thesis.model_validate(make_thesis_data(id="urn:uuid:" + THESIS_ID))

    @pytest.mark.parametrize("field", ["entryPrice", "quantity"])
    def test_non_positive_prices_rejected(self, field: str):
        with pytest.raises(ValidationError):
            Trade.model_validate(make_trade_data(**{field: 0}))

    def test_short_pre_trade_thesis_rejected(self):
        data = make_trade_data()
        data["preTradeNotes"]["thesis"] = "too short"
        with pytest.raises(ValidationError):
            Trade.model_validate(data)

    @pytest.mark.parametrize("quality", [0, 11])
    def test_execution_quality_out_of_range(self, quality: int):
        data = make_trade_data()
        data["postTradeNotes"]["executionQuality"] = quality
        with pytest.raises(ValidationError):
            Trade.model_validate(data)

    def test_updated_before_created_rejected(self):
        with pytest.raises(ValidationError):
            Trade.model_validate(make_trade_data(
                createdAt="2025-01-24T10:30:00.000Z",
                updatedAt="2025-01-24T10:29:59.999Z",
            ))

    def test_missing_pre_trade_notes_rejected(self):
        data = make_trade_data()
        del data["preTradeNotes"]
        with pytest.raises(ValidationError):
            Trade.model_validate(data)


class TestTradeSerialization:
    """
    **Feature: trading-journal, Property 2: camelCase JSON Round Trip**

    *For any* valid trade, serializing to JSON and validating the result
    yields an equal trade with camelCase keys and millisecond UTC timestamps.
    """

    def test_keys_are_camel_case(self):
        payload = Trade.model_validate(make_trade_data(realizedPnL=12.5)).to_json_dict()

        assert payload["type"] == "long"
        assert payload["entryDate"] == "2025-01-24T10:30:00.000Z"
        assert payload["preTradeNotes"]["riskAssessment"].startswith("Low risk")
        assert payload["duringTradeNotes"][0]["priceAtTime"] == 190.25
        assert payload["postTradeNotes"]["lessonsLearned"].startswith("Entry timing")
        assert payload["linkedThesisId"] == THESIS_ID
        assert payload["realizedPnL"] == 12.5
        assert "trade_type" not in payload
        assert "entry_date" not in payload

    def test_unset_optionals_are_omitted(self):
        payload = Trade.model_validate(make_minimal_trade_data()).to_json_dict()

        assert "exitDate" not in payload
        assert "postTradeNotes" not in payload
        assert "linkedThesisId" not in payload

    @given(payload=trade_payloads())
    @settings(max_examples=50)
    def test_json_round_trip(self, payload: dict):
        trade = Trade.model_validate(payload)
        again = Trade.model_validate(trade.to_json_dict())

        assert again.to_json_dict() == trade.to_json_dict()
        assert again.entry_date == trade.entry_date


class TestTimestamps:
    """
    **Feature: trading-journal, Property 3: Timestamp Normalization**

    *For any* timezone-aware entry date, the stored value is UTC with
    millisecond precision.
    """

    @given(
        moment=st.datetimes(
            min_value=datetime(2020, 1, 1), max_value=datetime(2030, 12, 31)
        ),
        offset_minutes=st.integers(min_value=-14 * 60, max_value=14 * 60),
    )
    @settings(max_examples=100)
    def test_normalized_to_utc_milliseconds(self, moment: datetime, offset_minutes: int):
        aware = moment.replace(tzinfo=timezone(timedelta(minutes=offset_minutes)))
        trade = Trade.model_validate(make_minimal_trade_data(
            entryDate=aware.isoformat(),
            createdAt="2020-01-01T00:00:00.000Z",
            updatedAt="2020-01-01T00:00:00.000Z",
        ))

        assert trade.entry_date.utcoffset() == timedelta(0)
        assert trade.entry_date.microsecond % 1000 == 0
        assert abs(trade.entry_date - aware) < timedelta(milliseconds=1)

    def test_format_timestamp(self):
        moment = datetime(2025, 1, 24, 10, 30, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2025-01-24T10:30:00.123Z"

    def test_naive_datetime_treated_as_utc(self):
        assert format_timestamp(datetime(2025, 1, 24, 10, 30)) == "2025-01-24T10:30:00.000Z"

    def test_year_bucket_uses_utc(self):
        # 23:30 on New Year's Eve in New York is already January 1st in UTC.
        trade = Trade.model_validate(make_minimal_trade_data(
            entryDate="2024-12-31T23:30:00-05:00",
            createdAt="2024-12-31T00:00:00.000Z",
            updatedAt="2024-12-31T00:00:00.000Z",
        ))

        assert trade.year == 2025
        assert trade.filename.startswith("TSLA_20250101_")


class TestFilenames:
    """
    **Feature: trading-journal, Property 4: Deterministic Filenames**

    *For any* entity, the filename is derived from its fields alone.
    """

    def test_trade_filename(self):
        trade = Trade.model_validate(make_trade_data())
        assert trade.filename == f"AAPL_20250124_{TRADE_ID}.json"
        assert trade.year == 2025

    def test_thesis_filename(self):
        thesis = Thesis.model_validate(make_thesis_data())
        assert thesis.filename == f"2025_Q1_{THESIS_ID}.json"


class TestThesisValidation:
    """
    **Feature: trading-journal, Property 5: Thesis Schema Validation**

    *For any* thesis payload, validation enforces quarter, year and the
    nested strategy, risk and goal constraints.
    """

    def test_example_is_valid(self):
        thesis = Thesis.model_validate(make_thesis_data())

        assert thesis.quarter == "Q1"
        assert thesis.market_outlook == "bullish"
        assert thesis.risk_parameters.max_position_size == 0.1
        assert thesis.goals.learning_objectives[0] == "Hold winners longer"
        assert thesis.versions[0].version_number == 1

    def test_is_active_defaults_to_true(self):
        data = make_thesis_data()
        del data["isActive"]
        assert Thesis.model_validate(data).is_active is True

    @pytest.mark.parametrize(
        "overrides",
        [
            {"quarter": "Q5"},
            {"year": 1999},
            {"year": 2101},
            {"title": "Q1"},
            {"marketOutlook": "sideways"},
        ],
    )
    def test_bad_top_level_fields(self, overrides: dict):
        with pytest.raises(ValidationError):
            Thesis.model_validate(make_thesis_data(**overrides))

    def test_empty_focus_rejected(self):
        data = make_thesis_data()
        data["strategies"]["focus"] = []
        with pytest.raises(ValidationError):
            Thesis.model_validate(data)

    @pytest.mark.parametrize("size", [0, 1.5])
    def test_max_position_size_bounds(self, size: float):
        data = make_thesis_data()
        data["riskParameters"]["maxPositionSize"] = size
        with pytest.raises(ValidationError):
            Thesis.model_validate(data)

    def test_short_learning_objective_rejected(self):
        data = make_thesis_data()
        data["goals"]["learningObjectives"] = ["Tiny"]
        with pytest.raises(ValidationError):
            Thesis.model_validate(data)

    def test_serializes_camel_case(self):
        payload = Thesis.model_validate(make_thesis_data()).to_json_dict()

        assert payload["marketOutlook"] == "bullish"
        assert payload["riskParameters"]["stopLossRules"].startswith("Hard stop")
        assert payload["goals"]["learningObjectives"]
        assert payload["isActive"] is True
        assert payload["createdAt"] == "2025-01-02T09:00:00.000Z"


class TestSummaries:
    """
    **Feature: trading-journal, Property 6: Summary Projection**

    *For any* entity, its summary carries the listed fields unchanged.
    """

    def test_trade_summary(self):
        trade = Trade.model_validate(make_trade_data())
        summary = TradeSummary.from_trade(trade)

        assert summary.id == trade.id
        assert summary.ticker == "AAPL"
        assert summary.trade_type == "long"
        assert summary.status == "closed"
        assert summary.outcome == "win"
        assert summary.profit_loss == 1325
        assert summary.linked_thesis_id == THESIS_ID
        assert summary.to_json_dict()["type"] == "long"

    def test_trade_summary_without_review(self):
        summary = TradeSummary.from_trade(Trade.model_validate(make_minimal_trade_data()))

        assert summary.outcome is None
        assert summary.profit_loss is None

    def test_thesis_summary(self):
        thesis = Thesis.model_validate(make_thesis_data())
        summary = ThesisSummary.from_thesis(thesis, trade_count=3)

        assert summary.title == thesis.title
        assert summary.quarter == "Q1"
        assert summary.year == 2025
        assert summary.is_active is True
        assert summary.to_json_dict()["tradeCount"] == 3


class TestApiResponse:
    """
    **Feature: trading-journal, Property 7: Response Envelope Shape**

    *For any* operation result, the envelope has ``success`` and a
    timestamp, plus ``data`` on success or ``error`` on failure.
    """

    def test_ok(self):
        response = ApiResponse.ok("abc")

        assert response.success is True
        assert response.data == "abc"
        assert response.error is None
        assert response.timestamp.endswith("Z")

    def test_fail(self):
        response = ApiResponse.fail("Failed to load trade: Trade not found", kind="NotFoundError")
        payload = response.to_json_dict()

        assert payload["success"] is False
        assert payload["error"] == "Failed to load trade: Trade not found"
        assert payload["errorKind"] == "NotFoundError"
        assert "data" not in payload

    def test_model_data_serialized_camel_case(self):
        metadata = BackupMetadata(
            id="backup_x", timestamp="2025-01-24T10:30:00.000Z", size=10, file_count=2
        )
        payload = ApiResponse.ok([metadata]).to_json_dict()

        assert payload["data"] == [{
            "id": "backup_x",
            "timestamp": "2025-01-24T10:30:00.000Z",
            "size": 10,
            "fileCount": 2,
            "version": "1.0.0",
        }]

    def test_restore_report_partial_flag(self):
        assert not RestoreReport(backup_id="b").is_partial
        report = RestoreReport(
            backup_id="b", failed=[FailedMove(entry="theses", error="denied")]
        )
        assert report.is_partial
