"""Shared fixtures: synthetic beta-binomial shooting data."""

from typing import List

import numpy as np
import pandas as pd
import pytest

from nba_quant.data.records import PlayerShotRecord


def make_synthetic_records(
    n_players: int = 400,
    intercept: float = 0.22,
    slope: float = 0.025,
    sigma: float = 0.008,
    min_attempts: int = 5,
    max_attempts: int = 800,
    seed: int = 7,
) -> List[PlayerShotRecord]:
    """Players whose true rate ~ Beta(mu/sigma, (1-mu)/sigma), mu linear in log(attempts)."""
    rng = np.random.default_rng(seed)
    attempts = rng.integers(min_attempts, max_attempts, size=n_players)
    mu = intercept + slope * np.log(attempts)
    true_rate = rng.beta(mu / sigma, (1 - mu) / sigma)
    made = rng.binomial(attempts, true_rate)
    return [
        PlayerShotRecord(player=f"Player {i:03d}", attempts=int(a), made=int(m))
        for i, (a, m) in enumerate(zip(attempts, made))
    ]


@pytest.fixture(scope="session")
def synthetic_records() -> List[PlayerShotRecord]:
    return make_synthetic_records()


@pytest.fixture
def synthetic_table(synthetic_records) -> pd.DataFrame:
    """Raw shot table as ingestion would supply it."""
    return pd.DataFrame(
        {
            "player": [r.player for r in synthetic_records],
            "attempts": [r.attempts for r in synthetic_records],
            "made": [r.made for r in synthetic_records],
            "pct": [r.pct for r in synthetic_records],
        }
    )


@pytest.fixture(scope="session")
def small_records() -> List[PlayerShotRecord]:
    return make_synthetic_records(n_players=150, seed=3)


@pytest.fixture
def shot_csv(tmp_path, small_records):
    """Small shot table on disk, with one impossible row."""
    rows = [{"player": r.player, "attempts": r.attempts, "made": r.made} for r in small_records]
    rows.append({"player": "Typo Row", "attempts": 10, "made": 15})
    path = tmp_path / "threes.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path
