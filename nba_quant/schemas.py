"""Pydantic schemas for the data contracts at the pipeline's edges."""

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ShotTableRow(BaseModel):
    """One raw row of a season totals table, as supplied by ingestion."""

    player: str = Field(..., min_length=1)
    attempts: int
    made: int
    pct: Optional[float] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("player", mode="before")
    @classmethod
    def strip_player(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("pct", mode="before")
    @classmethod
    def blank_pct_is_missing(cls, v: Any) -> Any:
        """Scraped tables leave pct blank (or NaN) for zero-attempt players."""
        if v is None:
            return None
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, float) and math.isnan(v):
            return None
        return v


class PosteriorRecord(BaseModel):
    """Full posterior for one player evaluated against the regression prior."""

    player: Optional[str] = None
    attempts: int
    made: int
    mu: float = Field(..., gt=0.0, lt=1.0)
    sigma: float = Field(..., gt=0.0)
    prior_alpha: float
    prior_beta: float
    posterior_alpha: float
    posterior_beta: float
    posterior_mean: float
    posterior_sd: float

    model_config = ConfigDict(frozen=True)
