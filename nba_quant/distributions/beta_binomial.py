"""
Beta-binomial likelihood for makes out of attempts.

If a player's true make rate p ~ Beta(a, b) and makes | p ~ Binomial(n, p),
makes follow a beta-binomial distribution with pmf

    P(y) = C(n, y) * B(y + a, n - y + b) / B(a, b)

where B is the Beta function. The binomial coefficient does not depend on
(a, b), so fitting only needs the kernel

    log B(y + a, n - y + b) - log B(a, b)

Gradients use the digamma function psi:

    d/da = psi(y + a) - psi(n + a + b) - psi(a) + psi(a + b)
    d/db = psi(n - y + b) - psi(n + a + b) - psi(b) + psi(a + b)
"""

from typing import Tuple

import numpy as np
from scipy.special import betaln, digamma, gammaln


def log_binomial_coefficient(attempts: np.ndarray, made: np.ndarray) -> np.ndarray:
    return gammaln(attempts + 1) - gammaln(made + 1) - gammaln(attempts - made + 1)


def beta_binomial_kernel(
    made: np.ndarray,
    missed: np.ndarray,
    alpha: np.ndarray,
    beta: np.ndarray,
) -> np.ndarray:
    """Per-observation log-likelihood without the binomial coefficient."""
    return betaln(made + alpha, missed + beta) - betaln(alpha, beta)


def beta_binomial_logpmf(
    made: np.ndarray,
    attempts: np.ndarray,
    alpha: np.ndarray,
    beta: np.ndarray,
) -> np.ndarray:
    """Full per-observation log-pmf, including the binomial coefficient."""
    made = np.asarray(made, dtype=float)
    attempts = np.asarray(attempts, dtype=float)
    missed = attempts - made
    return log_binomial_coefficient(attempts, made) + beta_binomial_kernel(
        made, missed, alpha, beta
    )


def beta_binomial_kernel_grad(
    made: np.ndarray,
    missed: np.ndarray,
    alpha: np.ndarray,
    beta: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Per-observation derivatives of the kernel w.r.t. alpha and beta."""
    total = made + missed + alpha + beta
    common = digamma(alpha + beta) - digamma(total)
    d_alpha = digamma(made + alpha) - digamma(alpha) + common
    d_beta = digamma(missed + beta) - digamma(beta) + common
    return d_alpha, d_beta
