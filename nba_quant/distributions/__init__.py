"""
Distributions for make-rate modeling.

- Beta: prior/posterior over a player's true make rate
- Beta-binomial: makes out of attempts when the make rate is Beta-distributed
"""

from .beta import (
    beta_mean,
    beta_sd,
    mean_dispersion_to_beta_params,
    beta_params_to_mean_dispersion,
    beta_credible_interval,
    fit_beta_from_rates,
)

from .beta_binomial import (
    beta_binomial_kernel,
    beta_binomial_kernel_grad,
    beta_binomial_logpmf,
    log_binomial_coefficient,
)

__all__ = [
    # Beta
    'beta_mean',
    'beta_sd',
    'mean_dispersion_to_beta_params',
    'beta_params_to_mean_dispersion',
    'beta_credible_interval',
    'fit_beta_from_rates',

    # Beta-binomial
    'beta_binomial_kernel',
    'beta_binomial_kernel_grad',
    'beta_binomial_logpmf',
    'log_binomial_coefficient',
]
