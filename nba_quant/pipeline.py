"""
End-to-end shrinkage analysis.

Stages run in a fixed order:
1. normalized shot records (ingestion)
2. global-prior conjugate shrinkage
3. beta-binomial regression fit (must succeed before stage 4)
4. per-player posteriors under the regression prior
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple
import logging

import pandas as pd

from nba_quant.config import settings
from nba_quant.data.records import (
    NormalizedShotTable,
    PlayerShotRecord,
    RejectedRow,
    normalize_shot_table,
    records_to_frame,
)
from nba_quant.models.beta_binomial_regression import BetaBinomialRegression, RegressionPriorModel
from nba_quant.models.conjugate import ConjugateShrinkageEstimator, GlobalPrior, estimate_global_prior
from nba_quant.models.fitting import MaximumLikelihoodFitter
from nba_quant.models.posterior_updater import posterior_frame

logger = logging.getLogger(__name__)

REGRESSION_COLUMNS = [
    "mu", "sigma", "prior_alpha", "prior_beta",
    "posterior_alpha", "posterior_beta", "posterior_mu_reg", "posterior_sd_reg",
]


@dataclass(frozen=True)
class ShrinkageAnalysis:
    """Everything one analysis run produces."""

    table: pd.DataFrame
    model: RegressionPriorModel
    prior: GlobalPrior
    rejected: Tuple[RejectedRow, ...] = field(default_factory=tuple)

    @property
    def n_players(self) -> int:
        return len(self.table)


def run_shrinkage_analysis(
    records: Sequence[PlayerShotRecord],
    prior: Optional[GlobalPrior] = None,
    fitter: Optional[MaximumLikelihoodFitter] = None,
    estimate_prior: bool = False,
) -> ShrinkageAnalysis:
    """
    Run global and regression shrinkage over validated records.

    Args:
        records: Shot records with attempts > 0
        prior: Global prior (configured default if None)
        fitter: Optimization strategy for the regression fit
        estimate_prior: Estimate the global prior from high-volume shooters
            instead of using ``prior``

    Returns:
        ShrinkageAnalysis whose table has raw, global and regression columns

    Raises:
        NonConvergence, DegenerateInput: The regression fit failed; no
            regression posteriors are produced
    """
    records = list(records)
    if estimate_prior:
        prior = estimate_global_prior(records)
    prior = prior or GlobalPrior.default()

    table = ConjugateShrinkageEstimator(prior).shrink_frame(records_to_frame(records))
    logger.info(f"Applied global prior Beta({prior.alpha:.2f}, {prior.beta:.2f}) to {len(table)} players")

    model = BetaBinomialRegression(fitter=fitter).fit(records)

    regression = posterior_frame(model, records)
    table = pd.concat(
        [table.reset_index(drop=True), regression[REGRESSION_COLUMNS].reset_index(drop=True)],
        axis=1,
    )
    table["regression_shrinkage"] = table["pct"] - table["posterior_mu_reg"]

    return ShrinkageAnalysis(table=table, model=model, prior=prior)


def analyze_shot_table(
    df: pd.DataFrame,
    min_attempts: Optional[int] = None,
    prior: Optional[GlobalPrior] = None,
    fitter: Optional[MaximumLikelihoodFitter] = None,
    estimate_prior: bool = False,
) -> ShrinkageAnalysis:
    """Normalize a raw shot table, then run the full analysis."""
    normalized: NormalizedShotTable = normalize_shot_table(
        df,
        min_attempts=min_attempts if min_attempts is not None else settings.MIN_ATTEMPTS,
    )
    analysis = run_shrinkage_analysis(
        normalized.records,
        prior=prior,
        fitter=fitter,
        estimate_prior=estimate_prior,
    )
    return ShrinkageAnalysis(
        table=analysis.table,
        model=analysis.model,
        prior=analysis.prior,
        rejected=normalized.rejected,
    )
