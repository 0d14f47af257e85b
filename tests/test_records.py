"""Tests for shot-table normalization."""

import numpy as np
import pandas as pd
import pytest

from nba_quant.data.records import (
    NormalizedShotTable,
    PlayerShotRecord,
    normalize_shot_table,
    parse_row,
    records_to_frame,
)
from nba_quant.exceptions import InvalidRecord
from nba_quant.models.conjugate import ConjugateShrinkageEstimator


@pytest.fixture
def raw_table() -> pd.DataFrame:
    """Mixed-quality table: valid rows, an impossible row, a zero-attempt row."""
    return pd.DataFrame(
        {
            "player": ["Stephen Curry", "Bench Guy", "Typo Row", "Big Man", "Role Player"],
            "attempts": [876, 0, 10, 4, 250],
            "made": [357, 0, 15, 1, 95],
            "pct": [0.408, np.nan, 1.5, 0.25, 0.38],
        }
    )


class TestPlayerShotRecord:
    """Record invariants."""

    def test_missed_and_pct(self) -> None:
        record = PlayerShotRecord("Shooter", attempts=100, made=40)
        assert record.missed == 60
        assert record.pct == pytest.approx(0.4)

    def test_zero_attempts_pct_undefined(self) -> None:
        assert PlayerShotRecord("Bench", attempts=0, made=0).pct is None

    def test_made_exceeds_attempts(self) -> None:
        with pytest.raises(InvalidRecord, match="exceeds attempts"):
            PlayerShotRecord("Typo", attempts=10, made=15)

    def test_invalid_record_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            PlayerShotRecord("Typo", attempts=5, made=-1)


class TestParseRow:
    """Row-level contract validation."""

    def test_strips_player_name(self) -> None:
        contract, record = parse_row({"player": "  Klay Thompson ", "attempts": 500, "made": 194})
        assert contract.player == "Klay Thompson"
        assert record.player == "Klay Thompson"

    def test_blank_pct_returns_no_record(self) -> None:
        contract, record = parse_row({"player": "Bench", "attempts": 0, "made": 0, "pct": ""})
        assert contract.pct is None
        assert record is None

    def test_non_numeric_counts_rejected(self) -> None:
        with pytest.raises(InvalidRecord):
            parse_row({"player": "Garbage", "attempts": "lots", "made": 3})

    def test_empty_player_rejected(self) -> None:
        with pytest.raises(InvalidRecord):
            parse_row({"player": "   ", "attempts": 10, "made": 3})


class TestNormalizeShotTable:
    """Table-level normalization."""

    def test_counts_and_order(self, raw_table) -> None:
        normalized = normalize_shot_table(raw_table)

        assert isinstance(normalized, NormalizedShotTable)
        assert [r.player for r in normalized.records] == ["Stephen Curry", "Role Player", "Big Man"]
        assert normalized.dropped_undefined == 1
        assert len(normalized.rejected) == 1
        assert normalized.rejected[0].player == "Typo Row"
        assert normalized.rejected[0].index == 2

    def test_sorted_descending_by_pct(self, raw_table) -> None:
        pcts = [r.pct for r in normalize_shot_table(raw_table).records]
        assert pcts == sorted(pcts, reverse=True)

    def test_min_attempts_cutoff(self, raw_table) -> None:
        normalized = normalize_shot_table(raw_table, min_attempts=100)
        assert [r.player for r in normalized.records] == ["Stephen Curry", "Role Player"]
        assert normalized.dropped_below_min == 1

    def test_rejected_row_absent_from_estimates(self, raw_table) -> None:
        """An impossible row never contributes to any downstream output."""
        normalized = normalize_shot_table(raw_table)
        table = ConjugateShrinkageEstimator().shrink_frame(normalized.to_frame())

        assert "Typo Row" not in set(table["player"])
        assert len(table) == 3

    def test_missing_column(self) -> None:
        df = pd.DataFrame({"player": ["A"], "attempts": [10]})
        with pytest.raises(KeyError):
            normalize_shot_table(df)

    def test_min_attempts_below_one(self, raw_table) -> None:
        with pytest.raises(ValueError):
            normalize_shot_table(raw_table, min_attempts=0)

    def test_all_rows_invalid(self) -> None:
        df = pd.DataFrame({"player": ["A", "B"], "attempts": [5, 3], "made": [6, 4]})
        with pytest.raises(InvalidRecord):
            normalize_shot_table(df)

    def test_pct_column_optional(self) -> None:
        df = pd.DataFrame({"player": ["A", "B"], "attempts": [10, 20], "made": [3, 9]})
        normalized = normalize_shot_table(df)
        assert [r.player for r in normalized.records] == ["B", "A"]


def test_records_to_frame_columns() -> None:
    frame = records_to_frame([PlayerShotRecord("A", attempts=10, made=4)])
    assert list(frame.columns) == ["player", "attempts", "made", "missed", "pct"]
    assert frame.loc[0, "missed"] == 6
