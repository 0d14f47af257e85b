"""Tests for per-player posteriors under the regression prior."""

import math

import pytest

from nba_quant.data.records import PlayerShotRecord
from nba_quant.exceptions import DegenerateInput
from nba_quant.models.beta_binomial_regression import RegressionPriorModel
from nba_quant.models.conjugate import ConjugateShrinkageEstimator, GlobalPrior
from nba_quant.models.posterior_updater import (
    POSTERIOR_COLUMNS,
    personalized_prior,
    posterior_frame,
    update_player,
    update_players,
)


@pytest.fixture
def model() -> RegressionPriorModel:
    return RegressionPriorModel(mu_intercept=0.2, mu_slope=0.03, sigma=0.01)


class TestPersonalizedPrior:
    """Regression prior evaluated at a player's attempts."""

    def test_shapes_at_hundred_attempts(self, model) -> None:
        prior = personalized_prior(model, 100)
        mu = 0.2 + 0.03 * math.log(100)

        assert prior.mu == pytest.approx(mu)
        assert prior.prior_alpha == pytest.approx(mu / 0.01)
        assert prior.prior_beta == pytest.approx((1 - mu) / 0.01)

    def test_prior_sum_is_inverse_sigma(self, model) -> None:
        prior = personalized_prior(model, 37)
        assert prior.prior_alpha + prior.prior_beta == pytest.approx(1 / model.sigma)

    def test_mean_outside_unit_interval(self) -> None:
        bad = RegressionPriorModel(mu_intercept=-1.5, mu_slope=0.3, sigma=0.01)
        with pytest.raises(DegenerateInput):
            personalized_prior(bad, 10)


class TestUpdatePlayer:
    """Conjugate update of the personalized prior."""

    def test_forty_of_hundred(self, model) -> None:
        result = update_player(model, PlayerShotRecord("Shooter", attempts=100, made=40))
        mu = 0.2 + 0.03 * math.log(100)

        assert result.player == "Shooter"
        assert result.posterior_alpha == pytest.approx(mu / 0.01 + 40)
        assert result.posterior_beta == pytest.approx((1 - mu) / 0.01 + 60)

    @pytest.mark.parametrize("attempts,made", [(1, 0), (12, 7), (300, 110), (750, 301)])
    def test_conservation_identity(self, model, attempts, made) -> None:
        result = update_player(model, PlayerShotRecord("P", attempts=attempts, made=made))
        assert result.posterior_alpha + result.posterior_beta == pytest.approx(
            attempts + result.prior_alpha + result.prior_beta
        )

    @pytest.mark.parametrize("attempts,made", [(10, 1), (10, 9), (200, 100), (600, 150)])
    def test_between_raw_and_prior_mean(self, model, attempts, made) -> None:
        result = update_player(model, PlayerShotRecord("P", attempts=attempts, made=made))
        low, high = sorted([made / attempts, result.mu])
        assert low < result.posterior_mean < high

    def test_flat_regression_matches_global_prior(self) -> None:
        """With zero slope the update is the global conjugate update."""
        prior = GlobalPrior(alpha=61.8, beta=106.2)
        flat = RegressionPriorModel(
            mu_intercept=prior.mean, mu_slope=0.0, sigma=1 / (prior.alpha + prior.beta)
        )
        record = PlayerShotRecord("Shooter", attempts=100, made=40)

        regression = update_player(flat, record)
        global_post = ConjugateShrinkageEstimator(prior).shrink(record)

        assert regression.posterior_alpha == pytest.approx(global_post.posterior_alpha)
        assert regression.posterior_beta == pytest.approx(global_post.posterior_beta)

    def test_zero_attempts_fails(self, model) -> None:
        with pytest.raises(DegenerateInput):
            update_player(model, PlayerShotRecord("Bench", attempts=0, made=0))

    def test_batch_fails_on_zero_attempts(self, model) -> None:
        records = [
            PlayerShotRecord("A", attempts=50, made=20),
            PlayerShotRecord("Bench", attempts=0, made=0),
        ]
        with pytest.raises(DegenerateInput):
            update_players(model, records)


def test_posterior_frame(model) -> None:
    records = [
        PlayerShotRecord("A", attempts=500, made=200),
        PlayerShotRecord("B", attempts=20, made=9),
        PlayerShotRecord("C", attempts=80, made=25),
    ]
    frame = posterior_frame(model, records)

    assert list(frame.columns) == POSTERIOR_COLUMNS
    assert list(frame["player"]) == ["A", "B", "C"]
    # higher volume, higher prior mean
    assert frame.loc[0, "mu"] > frame.loc[2, "mu"] > frame.loc[1, "mu"]
    assert (frame["posterior_sd_reg"] > 0).all()
