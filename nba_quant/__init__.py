"""NBA Quantitative Analytics: empirical Bayes three-point shooting.

Shrinks noisy raw three-point percentages toward a Beta prior, either a
single league-wide prior or one whose mean depends on shot volume through a
beta-binomial regression on log(attempts).
"""

__version__ = "0.1.0"
__author__ = "NBA Quant Team"

from nba_quant.models.beta_binomial_regression import BetaBinomialRegression, RegressionPriorModel
from nba_quant.models.conjugate import ConjugateShrinkageEstimator, GlobalPrior
from nba_quant.models.prediction import predict_new_player
from nba_quant.pipeline import analyze_shot_table, run_shrinkage_analysis

__all__ = [
    "BetaBinomialRegression",
    "RegressionPriorModel",
    "ConjugateShrinkageEstimator",
    "GlobalPrior",
    "predict_new_player",
    "analyze_shot_table",
    "run_shrinkage_analysis",
]
