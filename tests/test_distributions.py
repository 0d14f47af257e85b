"""Tests for Beta and beta-binomial helpers."""

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats

from nba_quant.distributions import (
    beta_binomial_kernel,
    beta_binomial_kernel_grad,
    beta_binomial_logpmf,
    beta_credible_interval,
    beta_mean,
    beta_params_to_mean_dispersion,
    beta_sd,
    fit_beta_from_rates,
    mean_dispersion_to_beta_params,
)


class TestBeta:
    """Beta moments and parameterizations."""

    def test_moments_match_scipy(self) -> None:
        assert beta_mean(61.8, 106.2) == pytest.approx(stats.beta.mean(61.8, 106.2))
        assert beta_sd(61.8, 106.2) == pytest.approx(stats.beta.std(61.8, 106.2))

    def test_mean_dispersion_conversion(self) -> None:
        alpha, beta = mean_dispersion_to_beta_params(0.35, 0.01)
        assert (alpha, beta) == pytest.approx((35.0, 65.0))
        assert beta_params_to_mean_dispersion(alpha, beta) == pytest.approx((0.35, 0.01))

    @pytest.mark.parametrize("mu,sigma", [(0.0, 0.01), (1.0, 0.01), (-0.8, 0.01), (0.3, 0.0)])
    def test_invalid_mean_dispersion(self, mu, sigma) -> None:
        with pytest.raises(ValueError):
            mean_dispersion_to_beta_params(mu, sigma)

    def test_credible_interval(self) -> None:
        lower, upper = beta_credible_interval(101.8, 166.2, level=0.9)
        assert stats.beta.cdf(lower, 101.8, 166.2) == pytest.approx(0.05)
        assert stats.beta.cdf(upper, 101.8, 166.2) == pytest.approx(0.95)

    def test_fit_beta_from_rates(self) -> None:
        rates = np.random.default_rng(5).beta(40, 60, size=2000)
        alpha, beta = fit_beta_from_rates(rates)
        assert beta_mean(alpha, beta) == pytest.approx(0.4, abs=0.01)

    def test_fit_beta_rejects_boundary_rates(self) -> None:
        with pytest.raises(ValueError):
            fit_beta_from_rates(np.array([0.0, 0.3, 0.4]))


class TestBetaBinomial:
    """Likelihood and analytic gradient."""

    def test_logpmf_matches_scipy(self) -> None:
        made = np.array([0, 3, 40, 120])
        attempts = np.array([5, 10, 100, 300])
        expected = stats.betabinom.logpmf(made, attempts, 33.8, 66.2)
        assert_allclose(beta_binomial_logpmf(made, attempts, 33.8, 66.2), expected)

    def test_gradient_matches_finite_differences(self) -> None:
        made = np.array([2.0, 40.0, 130.0])
        missed = np.array([8.0, 60.0, 270.0])
        alpha, beta, h = 30.0, 70.0, 1e-5

        d_alpha, d_beta = beta_binomial_kernel_grad(made, missed, alpha, beta)
        fd_alpha = (
            beta_binomial_kernel(made, missed, alpha + h, beta)
            - beta_binomial_kernel(made, missed, alpha - h, beta)
        ) / (2 * h)
        fd_beta = (
            beta_binomial_kernel(made, missed, alpha, beta + h)
            - beta_binomial_kernel(made, missed, alpha, beta - h)
        ) / (2 * h)

        assert_allclose(d_alpha, fd_alpha, rtol=1e-5, atol=1e-6)
        assert_allclose(d_beta, fd_beta, rtol=1e-5, atol=1e-6)
