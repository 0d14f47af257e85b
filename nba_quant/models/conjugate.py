"""
Conjugate Beta-Binomial Shrinkage
=================================

Shrinks raw three-point percentages toward a league-wide Beta prior.

Theory:
-------
With a Beta(alpha, beta) prior on a player's true make rate and a binomial
likelihood for makes out of attempts, the posterior is again Beta:

    posterior_alpha = alpha + made
    posterior_beta  = beta + missed

The posterior mean is a weighted blend of the raw rate and the prior mean,
with the raw rate's weight attempts / (attempts + alpha + beta). Players with
few attempts are pulled hard toward the prior; high-volume shooters keep
nearly their raw percentage.

Example:
--------
Prior (61.8, 106.2), 40 of 100:
    posterior = Beta(101.8, 166.2), mean 0.3799
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
import logging

import numpy as np
import pandas as pd

from nba_quant.config import settings
from nba_quant.data.records import PlayerShotRecord, records_to_frame
from nba_quant.distributions.beta import (
    beta_credible_interval,
    beta_mean,
    beta_sd,
    fit_beta_from_rates,
)
from nba_quant.exceptions import InvalidRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalPrior:
    """League-wide Beta prior over true three-point percentage."""

    alpha: float
    beta: float

    def __post_init__(self):
        if not (self.alpha > 0 and self.beta > 0):
            raise ValueError(
                f"Prior shape parameters must be positive, got ({self.alpha}, {self.beta})"
            )

    @property
    def mean(self) -> float:
        return beta_mean(self.alpha, self.beta)

    @property
    def sd(self) -> float:
        return beta_sd(self.alpha, self.beta)

    @classmethod
    def default(cls) -> "GlobalPrior":
        """Prior pinned in settings (61.8, 106.2 unless overridden)."""
        return cls(alpha=settings.PRIOR_ALPHA, beta=settings.PRIOR_BETA)


@dataclass(frozen=True)
class ConjugatePosterior:
    """Beta posterior for one player's true make rate."""

    posterior_alpha: float
    posterior_beta: float

    @property
    def posterior_mean(self) -> float:
        return beta_mean(self.posterior_alpha, self.posterior_beta)

    @property
    def posterior_sd(self) -> float:
        return beta_sd(self.posterior_alpha, self.posterior_beta)

    def credible_interval(self, level: Optional[float] = None) -> Tuple[float, float]:
        return beta_credible_interval(
            self.posterior_alpha,
            self.posterior_beta,
            level=level if level is not None else settings.CREDIBLE_LEVEL,
        )


def conjugate_update(alpha: float, beta: float, made: int, missed: int) -> ConjugatePosterior:
    """
    Update a Beta(alpha, beta) prior with binomial makes and misses.

    Shared by the global estimator and the per-player regression updater.

    Raises:
        InvalidRecord: Negative makes or misses
    """
    if made < 0 or missed < 0:
        raise InvalidRecord(f"made and missed must be non-negative, got ({made}, {missed})")
    return ConjugatePosterior(posterior_alpha=alpha + made, posterior_beta=beta + missed)


class ConjugateShrinkageEstimator:
    """
    Applies one global Beta prior to every player.
    """

    def __init__(self, prior: Optional[GlobalPrior] = None):
        """
        Args:
            prior: Global prior (uses configured default if None)
        """
        self.prior = prior or GlobalPrior.default()

    def shrink(self, record: PlayerShotRecord) -> ConjugatePosterior:
        """Posterior for one player."""
        return conjugate_update(self.prior.alpha, self.prior.beta, record.made, record.missed)

    def shrink_counts(self, attempts: int, made: int) -> ConjugatePosterior:
        """
        Posterior for raw counts.

        Raises:
            InvalidRecord: attempts < 0 or made outside [0, attempts]
        """
        record = PlayerShotRecord(player="", attempts=attempts, made=made)
        return self.shrink(record)

    def shrink_records(self, records: Iterable[PlayerShotRecord]) -> List[ConjugatePosterior]:
        return [self.shrink(r) for r in records]

    def shrink_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Add global-prior posterior columns to a shot table.

        Args:
            df: Table with made and missed (or attempts) columns

        Returns:
            New DataFrame with global_alpha, global_beta, global_mean,
            global_sd and global_shrinkage (raw pct minus posterior mean)
        """
        out = df.copy()
        missed = out["missed"] if "missed" in out.columns else out["attempts"] - out["made"]
        if (out["made"] < 0).any() or (missed < 0).any():
            raise InvalidRecord("Shot table has negative made or missed counts")

        out["global_alpha"] = self.prior.alpha + out["made"]
        out["global_beta"] = self.prior.beta + missed
        total = out["global_alpha"] + out["global_beta"]
        out["global_mean"] = out["global_alpha"] / total
        out["global_sd"] = np.sqrt(
            out["global_alpha"] * out["global_beta"] / (total ** 2 * (total + 1))
        )
        if "pct" in out.columns:
            out["global_shrinkage"] = out["pct"] - out["global_mean"]
        return out


def estimate_global_prior(
    records: Iterable[PlayerShotRecord],
    min_attempts: Optional[int] = None,
) -> GlobalPrior:
    """
    Estimate a global Beta prior from high-volume shooters.

    Fits a Beta distribution by maximum likelihood to the raw percentages of
    players with at least ``min_attempts`` attempts, where the raw rate is a
    reasonable proxy for the true rate.

    Args:
        records: Shot records
        min_attempts: Cutoff (defaults to settings.PRIOR_FIT_MIN_ATTEMPTS)

    Returns:
        GlobalPrior fitted to the qualifying players

    Raises:
        ValueError: Fewer than two qualifying players with rates in (0, 1)
    """
    cutoff = min_attempts if min_attempts is not None else settings.PRIOR_FIT_MIN_ATTEMPTS
    table = records_to_frame(records)
    qualified = table[(table["attempts"] >= cutoff) & table["pct"].between(0, 1, inclusive="neither")]

    alpha, beta = fit_beta_from_rates(qualified["pct"].to_numpy(dtype=float))
    prior = GlobalPrior(alpha=alpha, beta=beta)
    logger.info(
        f"Estimated global prior from {len(qualified)} players with >= {cutoff} attempts: "
        f"alpha={alpha:.2f}, beta={beta:.2f}, mean={prior.mean:.4f}"
    )
    return prior
