"""
NBA Quant Models
"""

from .conjugate import (
    GlobalPrior,
    ConjugatePosterior,
    ConjugateShrinkageEstimator,
    conjugate_update,
    estimate_global_prior,
)
from .fitting import (
    FitResult,
    MaximumLikelihoodFitter,
    ScipyMaximumLikelihoodFitter,
)
from .beta_binomial_regression import (
    BetaBinomialRegression,
    RegressionPriorModel,
)
from .posterior_updater import (
    PersonalizedPrior,
    RegressionPosterior,
    personalized_prior,
    update_player,
    update_players,
    posterior_frame,
)
from .prediction import (
    PredictionRequest,
    PredictionService,
    predict_new_player,
    to_posterior_record,
)

__all__ = [
    # Global prior shrinkage
    'GlobalPrior',
    'ConjugatePosterior',
    'ConjugateShrinkageEstimator',
    'conjugate_update',
    'estimate_global_prior',
    # Fitting strategies
    'FitResult',
    'MaximumLikelihoodFitter',
    'ScipyMaximumLikelihoodFitter',
    # Regression prior
    'BetaBinomialRegression',
    'RegressionPriorModel',
    # Per-player posteriors
    'PersonalizedPrior',
    'RegressionPosterior',
    'personalized_prior',
    'update_player',
    'update_players',
    'posterior_frame',
    # Unseen players
    'PredictionRequest',
    'PredictionService',
    'predict_new_player',
    'to_posterior_record',
]
