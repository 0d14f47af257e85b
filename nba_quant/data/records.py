"""
Player shot records and shot-table normalization.

A shot table is any rectangular dataset with one row per player-season and
at least ``player``, ``attempts`` and ``made`` columns. Normalization turns
it into validated ``PlayerShotRecord`` objects:

- rows with inconsistent counts are rejected (reported, batch continues)
- rows with an undefined percentage (zero attempts) are dropped
- rows below the minimum-attempts cutoff are dropped
- survivors are sorted by raw percentage, best first
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
import logging

import pandas as pd
from pydantic import ValidationError

from nba_quant.exceptions import InvalidRecord
from nba_quant.schemas import ShotTableRow

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("player", "attempts", "made")


@dataclass(frozen=True)
class PlayerShotRecord:
    """Three-point makes and attempts for one player-season."""

    player: str
    attempts: int
    made: int

    def __post_init__(self):
        if self.attempts < 0:
            raise InvalidRecord(
                f"{self.player}: attempts must be non-negative, got {self.attempts}"
            )
        if self.made < 0:
            raise InvalidRecord(f"{self.player}: made must be non-negative, got {self.made}")
        if self.made > self.attempts:
            raise InvalidRecord(
                f"{self.player}: made ({self.made}) exceeds attempts ({self.attempts})"
            )

    @property
    def missed(self) -> int:
        return self.attempts - self.made

    @property
    def pct(self) -> Optional[float]:
        """Raw make rate, undefined for zero attempts."""
        if self.attempts == 0:
            return None
        return self.made / self.attempts


@dataclass(frozen=True)
class RejectedRow:
    """A row that failed validation, with the reason."""

    index: int
    player: str
    reason: str


@dataclass(frozen=True)
class NormalizedShotTable:
    """Result of normalizing a raw shot table."""

    records: Tuple[PlayerShotRecord, ...]
    rejected: Tuple[RejectedRow, ...] = field(default_factory=tuple)
    dropped_undefined: int = 0
    dropped_below_min: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def to_frame(self) -> pd.DataFrame:
        """Records as a DataFrame with player, attempts, made, missed, pct."""
        return records_to_frame(self.records)


def records_to_frame(records: Iterable[PlayerShotRecord]) -> pd.DataFrame:
    rows = [
        {
            "player": r.player,
            "attempts": r.attempts,
            "made": r.made,
            "missed": r.missed,
            "pct": r.pct,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=["player", "attempts", "made", "missed", "pct"])


def parse_row(row: Dict, index: int = 0) -> Tuple[ShotTableRow, Optional[PlayerShotRecord]]:
    """
    Validate one raw row.

    Returns:
        (contract_row, record) where record is None when the percentage is
        undefined (zero attempts).

    Raises:
        InvalidRecord: non-numeric or inconsistent counts
    """
    try:
        contract = ShotTableRow.model_validate(row)
    except ValidationError as e:
        raise InvalidRecord(f"row {index}: {e.error_count()} validation error(s): {e}") from e

    record = PlayerShotRecord(
        player=contract.player,
        attempts=contract.attempts,
        made=contract.made,
    )
    if record.pct is None:
        return contract, None
    return contract, record


def normalize_shot_table(
    df: pd.DataFrame,
    min_attempts: int = 1,
) -> NormalizedShotTable:
    """
    Normalize a raw shot table into validated records.

    Args:
        df: Table with player, attempts, made (and optionally pct) columns
        min_attempts: Minimum attempts for a record to be kept (>= 1)

    Returns:
        NormalizedShotTable sorted descending by raw percentage

    Raises:
        KeyError: Required columns missing
        ValueError: min_attempts < 1
        InvalidRecord: Every row in a non-empty table is invalid
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Shot table missing required columns: {missing}")
    if min_attempts < 1:
        raise ValueError(f"min_attempts must be >= 1 for log(attempts), got {min_attempts}")

    columns = [c for c in (*REQUIRED_COLUMNS, "pct") if c in df.columns]
    records: List[PlayerShotRecord] = []
    rejected: List[RejectedRow] = []
    dropped_undefined = 0
    dropped_below_min = 0

    for index, row in enumerate(df[columns].to_dict(orient="records")):
        try:
            _, record = parse_row(row, index=index)
        except InvalidRecord as e:
            player = str(row.get("player", ""))
            logger.warning(f"Rejected shot row {index} ({player}): {e}")
            rejected.append(RejectedRow(index=index, player=player, reason=str(e)))
            continue

        if record is None:
            dropped_undefined += 1
            continue
        if record.attempts < min_attempts:
            dropped_below_min += 1
            continue
        records.append(record)

    if len(df) > 0 and len(rejected) == len(df):
        raise InvalidRecord(f"All {len(df)} shot rows failed validation")

    records.sort(key=lambda r: r.pct, reverse=True)

    logger.info(
        f"Normalized shot table: kept {len(records)}, rejected {len(rejected)}, "
        f"undefined pct {dropped_undefined}, below {min_attempts} attempts {dropped_below_min}"
    )
    return NormalizedShotTable(
        records=tuple(records),
        rejected=tuple(rejected),
        dropped_undefined=dropped_undefined,
        dropped_below_min=dropped_below_min,
    )
