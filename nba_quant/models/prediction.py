"""
Posterior estimates for players outside the training set.

Evaluates the fitted regression at a new player's attempts and applies the
same conjugate update used for training players. The model is only read.

Usage:
    from nba_quant.models.prediction import predict_new_player

    estimate = predict_new_player(model, attempts=10, made=2)
    print(estimate.posterior_mean)
"""

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple
import logging

from nba_quant.data.records import PlayerShotRecord
from nba_quant.exceptions import InvalidInput, InvalidRecord
from nba_quant.models.beta_binomial_regression import RegressionPriorModel
from nba_quant.models.posterior_updater import RegressionPosterior, update_player
from nba_quant.schemas import PosteriorRecord

logger = logging.getLogger(__name__)


def predict_new_player(
    model: RegressionPriorModel,
    attempts: int,
    made: int,
    player: Optional[str] = None,
) -> RegressionPosterior:
    """
    Posterior for an unseen player's (attempts, made).

    Args:
        model: Fitted regression prior
        attempts: Three-point attempts (> 0)
        made: Three-point makes (0 <= made <= attempts)
        player: Optional label carried into the result

    Returns:
        RegressionPosterior with mu, sigma, personalized prior and posterior

    Raises:
        InvalidInput: attempts <= 0, or made outside [0, attempts]
        DegenerateInput: mu at these attempts falls outside (0, 1)
    """
    if attempts <= 0:
        raise InvalidInput(f"attempts must be positive, got {attempts}")
    try:
        record = PlayerShotRecord(player=player or "", attempts=attempts, made=made)
    except InvalidRecord as e:
        raise InvalidInput(str(e)) from e

    if not model.in_fitted_range(attempts):
        logger.warning(
            f"{attempts} attempts is outside the fitted covariate range; "
            f"prior mean is an extrapolation"
        )

    return replace(update_player(model, record), player=player)


def to_posterior_record(result: RegressionPosterior) -> PosteriorRecord:
    """Serializable form of a regression posterior."""
    return PosteriorRecord(
        player=result.player,
        attempts=result.attempts,
        made=result.made,
        mu=result.mu,
        sigma=result.sigma,
        prior_alpha=result.prior_alpha,
        prior_beta=result.prior_beta,
        posterior_alpha=result.posterior_alpha,
        posterior_beta=result.posterior_beta,
        posterior_mean=result.posterior_mean,
        posterior_sd=result.posterior_sd,
    )


@dataclass(frozen=True)
class PredictionRequest:
    attempts: int
    made: int
    player: Optional[str] = None


class PredictionService:
    """
    Answers ad hoc posterior queries against one fitted model.
    """

    def __init__(self, model: RegressionPriorModel):
        self.model = model

    def predict(self, attempts: int, made: int, player: Optional[str] = None) -> PosteriorRecord:
        return to_posterior_record(predict_new_player(self.model, attempts, made, player=player))

    def predict_many(
        self,
        requests: Iterable[PredictionRequest],
    ) -> Tuple[List[PosteriorRecord], List[Tuple[PredictionRequest, str]]]:
        """
        Evaluate many requests independently.

        Requests with invalid input are skipped and reported; they do not
        affect the others.

        Returns:
            (records, rejected) where rejected pairs each skipped request
            with its error message
        """
        records: List[PosteriorRecord] = []
        rejected: List[Tuple[PredictionRequest, str]] = []
        for request in requests:
            try:
                records.append(self.predict(request.attempts, request.made, player=request.player))
            except InvalidInput as e:
                logger.warning(f"Skipping prediction request {request}: {e}")
                rejected.append((request, str(e)))
        return records, rejected
