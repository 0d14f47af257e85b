"""Shot data ingestion and normalization."""

from .fetcher import ShotDataFetcher, FetchError, load_shot_table, parse_totals_table
from .records import (
    PlayerShotRecord,
    NormalizedShotTable,
    RejectedRow,
    normalize_shot_table,
    records_to_frame,
)

__all__ = [
    "ShotDataFetcher",
    "FetchError",
    "load_shot_table",
    "parse_totals_table",
    "PlayerShotRecord",
    "NormalizedShotTable",
    "RejectedRow",
    "normalize_shot_table",
    "records_to_frame",
]
