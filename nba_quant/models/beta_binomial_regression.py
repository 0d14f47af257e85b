"""
Beta-Binomial Regression Prior
==============================

Fits a prior whose mean depends on shot volume.

Players who take more threes are, on average, better shooters, so a single
league-wide prior over-shrinks low-volume players toward a mean set by the
high-volume ones. This model lets the prior mean vary with log(attempts):

    mu_i    = mu_intercept + mu_slope * log(attempts_i)     (identity link)
    sigma   = exp(log_sigma)                                (log link, shared)
    alpha_i = mu_i / sigma
    beta_i  = (1 - mu_i) / sigma

and maximizes the beta-binomial log-likelihood of each player's
(made, missed) over (mu_intercept, mu_slope, log_sigma).

The identity link does not bound mu to (0, 1). The objective treats any
parameter vector that puts a player's mean outside (0, 1) as infeasible,
and every later evaluation of mu (training or out-of-sample) re-checks the
bound.
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union
import json
import logging
import math

import numpy as np

from nba_quant.data.records import PlayerShotRecord
from nba_quant.distributions.beta_binomial import (
    beta_binomial_kernel,
    beta_binomial_kernel_grad,
    log_binomial_coefficient,
)
from nba_quant.exceptions import DegenerateInput, NonConvergence
from nba_quant.models.fitting import MaximumLikelihoodFitter, ScipyMaximumLikelihoodFitter

logger = logging.getLogger(__name__)

N_PARAMS = 3
LOG_SIGMA_BOUNDS = (-30.0, 30.0)
MIN_START_DISPERSION_RATIO = 1e-4
MAX_START_DISPERSION_RATIO = 0.5


@dataclass(frozen=True)
class RegressionPriorModel:
    """Fitted beta-binomial regression. Read-only once created."""

    mu_intercept: float
    mu_slope: float
    sigma: float
    log_likelihood: float = float("nan")
    n_obs: int = 0
    n_iterations: int = 0
    min_log_attempts: float = float("nan")
    max_log_attempts: float = float("nan")

    def __post_init__(self):
        if not (math.isfinite(self.sigma) and self.sigma > 0):
            raise DegenerateInput(f"sigma must be positive and finite, got {self.sigma}")
        if not (math.isfinite(self.mu_intercept) and math.isfinite(self.mu_slope)):
            raise DegenerateInput(
                f"Coefficients must be finite, got ({self.mu_intercept}, {self.mu_slope})"
            )

    @property
    def global_deviance(self) -> float:
        return -2.0 * self.log_likelihood

    @property
    def aic(self) -> float:
        return 2.0 * N_PARAMS - 2.0 * self.log_likelihood

    def linear_predictor(self, attempts: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """
        Unchecked mu_intercept + mu_slope * log(attempts).

        Raises:
            DegenerateInput: Any attempts <= 0
        """
        arr = np.asarray(attempts, dtype=float)
        if np.any(arr <= 0):
            raise DegenerateInput("log(attempts) is undefined for attempts <= 0")
        eta = self.mu_intercept + self.mu_slope * np.log(arr)
        return float(eta) if eta.ndim == 0 else eta

    def mu_at(self, attempts: float) -> float:
        """
        Prior mean for a player with ``attempts`` three-point attempts.

        Raises:
            DegenerateInput: attempts <= 0, or the mean falls outside (0, 1)
        """
        mu = self.linear_predictor(attempts)
        if not 0 < mu < 1:
            raise DegenerateInput(
                f"Prior mean {mu:.4f} at {attempts} attempts is outside (0, 1)"
            )
        return mu

    def in_fitted_range(self, attempts: float) -> bool:
        """Whether log(attempts) lies inside the covariate range seen in training."""
        if attempts <= 0 or math.isnan(self.min_log_attempts):
            return False
        x = math.log(attempts)
        return self.min_log_attempts <= x <= self.max_log_attempts

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "RegressionPriorModel":
        return cls(
            mu_intercept=float(data["mu_intercept"]),
            mu_slope=float(data["mu_slope"]),
            sigma=float(data["sigma"]),
            log_likelihood=float(data.get("log_likelihood", float("nan"))),
            n_obs=int(data.get("n_obs", 0)),
            n_iterations=int(data.get("n_iterations", 0)),
            min_log_attempts=float(data.get("min_log_attempts", float("nan"))),
            max_log_attempts=float(data.get("max_log_attempts", float("nan"))),
        )

    def save(self, path: Path) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        logger.info(f"Saved regression prior model to {path}")

    @classmethod
    def load(cls, path: Path) -> "RegressionPriorModel":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(data)


class _BetaBinomialObjective:
    """Negative log-likelihood kernel and gradient over (b0, b1, log_sigma)."""

    def __init__(self, log_attempts: np.ndarray, made: np.ndarray, missed: np.ndarray):
        self.x = log_attempts
        self.made = made
        self.missed = missed

    def _shapes(self, theta: np.ndarray) -> Optional[Tuple[np.ndarray, np.ndarray, np.ndarray, float]]:
        b0, b1, log_sigma = theta
        if not LOG_SIGMA_BOUNDS[0] < log_sigma < LOG_SIGMA_BOUNDS[1]:
            return None
        mu = b0 + b1 * self.x
        if np.any(mu <= 0) or np.any(mu >= 1):
            return None
        sigma = math.exp(log_sigma)
        return mu, mu / sigma, (1 - mu) / sigma, sigma

    def __call__(self, theta: np.ndarray) -> float:
        shapes = self._shapes(theta)
        if shapes is None:
            return np.inf
        _, alpha, beta, _ = shapes
        return -float(np.sum(beta_binomial_kernel(self.made, self.missed, alpha, beta)))

    def gradient(self, theta: np.ndarray) -> np.ndarray:
        shapes = self._shapes(theta)
        if shapes is None:
            return np.zeros(N_PARAMS)
        _, alpha, beta, sigma = shapes
        d_alpha, d_beta = beta_binomial_kernel_grad(self.made, self.missed, alpha, beta)
        d_mu = (d_alpha - d_beta) / sigma
        return -np.array([
            np.sum(d_mu),
            np.sum(d_mu * self.x),
            -np.sum(alpha * d_alpha + beta * d_beta),
        ])


class BetaBinomialRegression:
    """
    Maximum-likelihood beta-binomial regression of makes on log(attempts).
    """

    def __init__(self, fitter: Optional[MaximumLikelihoodFitter] = None):
        """
        Args:
            fitter: Optimization strategy (Nelder-Mead + BFGS polish if None)
        """
        self.fitter = fitter or ScipyMaximumLikelihoodFitter()

    @staticmethod
    def _arrays(records: Sequence[PlayerShotRecord]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        attempts = np.array([r.attempts for r in records], dtype=float)
        if np.any(attempts <= 0):
            zero = [r.player for r in records if r.attempts <= 0]
            raise DegenerateInput(
                f"{len(zero)} player(s) with zero attempts reached the regression fit: {zero[:5]}"
            )
        made = np.array([r.made for r in records], dtype=float)
        return attempts, made, attempts - made

    @staticmethod
    def start_point(attempts: np.ndarray, made: np.ndarray) -> np.ndarray:
        """
        Feasible start: pooled make rate, zero slope, moment-based dispersion.

        Between-player variance of raw rates beyond binomial noise gives
        sigma / (1 + sigma) = var_between / (p * (1 - p)).

        Raises:
            DegenerateInput: Pooled make rate is 0 or 1
        """
        pooled = made.sum() / attempts.sum()
        if not 0 < pooled < 1:
            raise DegenerateInput(f"Pooled make rate {pooled:.4f} leaves no feasible prior mean")

        rates = made / attempts
        binomial_var = np.mean(pooled * (1 - pooled) / attempts)
        between_var = np.var(rates) - binomial_var
        ratio = np.clip(
            between_var / (pooled * (1 - pooled)),
            MIN_START_DISPERSION_RATIO,
            MAX_START_DISPERSION_RATIO,
        )
        sigma0 = ratio / (1 - ratio)
        return np.array([pooled, 0.0, math.log(sigma0)])

    def fit(self, records: Iterable[PlayerShotRecord]) -> RegressionPriorModel:
        """
        Fit the regression prior.

        Args:
            records: Shot records, all with attempts > 0

        Returns:
            RegressionPriorModel

        Raises:
            DegenerateInput: Zero-attempt records, or pooled rate of 0 or 1
            NonConvergence: Too few players, no covariate variation, or the
                optimizer failed to converge
        """
        records = list(records)
        if len(records) < N_PARAMS:
            raise NonConvergence(
                f"Need at least {N_PARAMS} players to fit {N_PARAMS} parameters, got {len(records)}"
            )

        attempts, made, missed = self._arrays(records)
        log_attempts = np.log(attempts)
        if np.ptp(log_attempts) == 0:
            raise NonConvergence("log(attempts) has no variation; mu_slope is not identifiable")

        x0 = self.start_point(attempts, made)
        logger.info(
            f"Fitting beta-binomial regression on {len(records)} players "
            f"(start: intercept={x0[0]:.4f}, slope=0, sigma={math.exp(x0[2]):.5f})"
        )

        objective = _BetaBinomialObjective(log_attempts, made, missed)
        result = self.fitter.minimize(objective, x0, gradient=objective.gradient)

        b0, b1, log_sigma = (float(v) for v in result.params)
        sigma = math.exp(log_sigma) if math.isfinite(log_sigma) else float("nan")
        if not (math.isfinite(b0) and math.isfinite(b1) and math.isfinite(sigma) and sigma > 0):
            raise NonConvergence(f"Fit produced invalid parameters {result.params.tolist()}")

        mu = b0 + b1 * log_attempts
        if np.any(mu <= 0) or np.any(mu >= 1):
            raise DegenerateInput("Fitted prior mean falls outside (0, 1) for a training player")

        log_likelihood = -result.neg_log_likelihood + float(
            np.sum(log_binomial_coefficient(attempts, made))
        )
        model = RegressionPriorModel(
            mu_intercept=b0,
            mu_slope=b1,
            sigma=sigma,
            log_likelihood=log_likelihood,
            n_obs=len(records),
            n_iterations=result.n_iterations,
            min_log_attempts=float(log_attempts.min()),
            max_log_attempts=float(log_attempts.max()),
        )
        logger.info(
            f"Fitted regression prior ({result.method}, {result.n_iterations} iterations): "
            f"mu = {b0:.4f} + {b1:.4f} * log(attempts), sigma={sigma:.5f}, "
            f"logLik={log_likelihood:.2f}, AIC={model.aic:.2f}"
        )
        return model
