"""Per-player posteriors under the fitted regression prior."""

from dataclasses import dataclass
from typing import Iterable, List, Optional
import logging

import pandas as pd

from nba_quant.data.records import PlayerShotRecord
from nba_quant.distributions.beta import mean_dispersion_to_beta_params
from nba_quant.exceptions import DegenerateInput
from nba_quant.models.beta_binomial_regression import RegressionPriorModel
from nba_quant.models.conjugate import ConjugatePosterior, conjugate_update

logger = logging.getLogger(__name__)

POSTERIOR_COLUMNS = [
    "player", "attempts", "made", "mu", "sigma", "prior_alpha", "prior_beta",
    "posterior_alpha", "posterior_beta", "posterior_mu_reg", "posterior_sd_reg",
]


@dataclass(frozen=True)
class PersonalizedPrior:
    """Beta prior for one player, derived from the regression at their attempts."""

    mu: float
    sigma: float
    prior_alpha: float
    prior_beta: float


@dataclass(frozen=True)
class RegressionPosterior:
    """A player's personalized prior together with its conjugate posterior."""

    player: Optional[str]
    attempts: int
    made: int
    prior: PersonalizedPrior
    posterior: ConjugatePosterior

    @property
    def mu(self) -> float:
        return self.prior.mu

    @property
    def sigma(self) -> float:
        return self.prior.sigma

    @property
    def prior_alpha(self) -> float:
        return self.prior.prior_alpha

    @property
    def prior_beta(self) -> float:
        return self.prior.prior_beta

    @property
    def posterior_alpha(self) -> float:
        return self.posterior.posterior_alpha

    @property
    def posterior_beta(self) -> float:
        return self.posterior.posterior_beta

    @property
    def posterior_mean(self) -> float:
        return self.posterior.posterior_mean

    @property
    def posterior_sd(self) -> float:
        return self.posterior.posterior_sd


def personalized_prior(model: RegressionPriorModel, attempts: float) -> PersonalizedPrior:
    """
    Evaluate the regression prior at a player's attempts.

    Raises:
        DegenerateInput: attempts <= 0, or mu outside (0, 1)
    """
    mu = model.mu_at(attempts)
    try:
        prior_alpha, prior_beta = mean_dispersion_to_beta_params(mu, model.sigma)
    except ValueError as e:
        raise DegenerateInput(str(e)) from e
    return PersonalizedPrior(mu=mu, sigma=model.sigma, prior_alpha=prior_alpha, prior_beta=prior_beta)


def update_player(model: RegressionPriorModel, record: PlayerShotRecord) -> RegressionPosterior:
    """Conjugate update of one player's personalized prior with their makes/misses."""
    prior = personalized_prior(model, record.attempts)
    posterior = conjugate_update(prior.prior_alpha, prior.prior_beta, record.made, record.missed)
    return RegressionPosterior(
        player=record.player,
        attempts=record.attempts,
        made=record.made,
        prior=prior,
        posterior=posterior,
    )


def update_players(
    model: RegressionPriorModel,
    records: Iterable[PlayerShotRecord],
) -> List[RegressionPosterior]:
    """
    Regression posteriors for every player.

    Raises:
        DegenerateInput: Any zero-attempt record or out-of-range mean; the
            whole batch fails since the model or the upstream filter is wrong
    """
    return [update_player(model, r) for r in records]


def posterior_frame(
    model: RegressionPriorModel,
    records: Iterable[PlayerShotRecord],
) -> pd.DataFrame:
    """
    Regression posteriors as a DataFrame.

    Columns: player, attempts, made, mu, sigma, prior_alpha, prior_beta,
    posterior_alpha, posterior_beta, posterior_mu_reg, posterior_sd_reg
    """
    updates = update_players(model, records)
    rows = [
        {
            "player": u.player,
            "attempts": u.attempts,
            "made": u.made,
            "mu": u.mu,
            "sigma": u.sigma,
            "prior_alpha": u.prior_alpha,
            "prior_beta": u.prior_beta,
            "posterior_alpha": u.posterior_alpha,
            "posterior_beta": u.posterior_beta,
            "posterior_mu_reg": u.posterior_mean,
            "posterior_sd_reg": u.posterior_sd,
        }
        for u in updates
    ]
    logger.debug(f"Computed regression posteriors for {len(rows)} players")
    return pd.DataFrame(rows, columns=POSTERIOR_COLUMNS)
