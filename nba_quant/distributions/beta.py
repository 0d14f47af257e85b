"""
Beta distribution helpers for make-rate priors and posteriors.

Two parameterizations are used throughout:
- (alpha, beta): shape parameters, mean = alpha / (alpha + beta)
- (mu, sigma): mean and dispersion, alpha = mu / sigma, beta = (1 - mu) / sigma

The (mu, sigma) form matches the beta-binomial regression, where sigma is
shared across players and mu depends on attempts.
"""

import logging
import math
from typing import Tuple

import numpy as np
from scipy import stats

logger = logging.getLogger(__name__)


def beta_mean(alpha: float, beta: float) -> float:
    return alpha / (alpha + beta)


def beta_sd(alpha: float, beta: float) -> float:
    """Standard deviation of Beta(alpha, beta)."""
    total = alpha + beta
    return math.sqrt((alpha * beta) / (total ** 2 * (total + 1)))


def mean_dispersion_to_beta_params(mu: float, sigma: float) -> Tuple[float, float]:
    """
    Convert (mu, sigma) to Beta (alpha, beta) shape parameters.

    Raises:
        ValueError: If sigma <= 0 or mu is outside (0, 1)
    """
    if not sigma > 0:
        raise ValueError(f"sigma must be positive, got {sigma}")
    if not 0 < mu < 1:
        raise ValueError(f"mu must be in (0, 1), got {mu}")
    return mu / sigma, (1 - mu) / sigma


def beta_params_to_mean_dispersion(alpha: float, beta: float) -> Tuple[float, float]:
    """Inverse of mean_dispersion_to_beta_params."""
    if alpha <= 0 or beta <= 0:
        raise ValueError(f"alpha and beta must be positive, got ({alpha}, {beta})")
    total = alpha + beta
    return alpha / total, 1.0 / total


def beta_credible_interval(alpha: float, beta: float, level: float = 0.95) -> Tuple[float, float]:
    """
    Equal-tailed credible interval of Beta(alpha, beta).

    Example:
        >>> beta_credible_interval(101.8, 166.2)
        (0.322..., 0.438...)
    """
    if not 0 < level < 1:
        raise ValueError(f"level must be in (0, 1), got {level}")
    tail = (1 - level) / 2
    lower, upper = stats.beta.ppf([tail, 1 - tail], alpha, beta)
    return float(lower), float(upper)


def fit_beta_from_rates(rates: np.ndarray) -> Tuple[float, float]:
    """
    Maximum-likelihood Beta fit to observed rates on (0, 1).

    Location and scale are fixed at 0 and 1, so only the two shape
    parameters are estimated.

    Raises:
        ValueError: Fewer than two rates, or rates at 0 or 1
    """
    rates = np.asarray(rates, dtype=float)
    if len(rates) < 2:
        raise ValueError("Need at least two rates to fit a Beta distribution")
    if np.any(rates <= 0) or np.any(rates >= 1):
        raise ValueError("Rates must lie strictly between 0 and 1 for a Beta fit")

    alpha, beta, _, _ = stats.beta.fit(rates, floc=0, fscale=1)
    logger.debug(f"Fitted Beta(alpha={alpha:.2f}, beta={beta:.2f}) to {len(rates)} rates")
    return float(alpha), float(beta)
