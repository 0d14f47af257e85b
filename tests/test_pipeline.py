"""Tests for the end-to-end analysis and its reports."""

import json

import pandas as pd
import pytest

from nba_quant.exceptions import NonConvergence
from nba_quant.models.conjugate import GlobalPrior
from nba_quant.models.fitting import ScipyMaximumLikelihoodFitter
from nba_quant.pipeline import analyze_shot_table, run_shrinkage_analysis
from nba_quant.reports import (
    format_report,
    plot_prior_mean_curve,
    plot_shrinkage_comparison,
    summarize_analysis,
)


@pytest.fixture(scope="module")
def analysis(small_records):
    return run_shrinkage_analysis(small_records, prior=GlobalPrior(alpha=61.8, beta=106.2))


class TestRunShrinkageAnalysis:
    """Global and regression stages over validated records."""

    def test_table_has_all_estimates(self, analysis, small_records) -> None:
        table = analysis.table
        expected = {
            "player", "attempts", "made", "missed", "pct",
            "global_alpha", "global_beta", "global_mean", "global_shrinkage",
            "mu", "sigma", "prior_alpha", "prior_beta",
            "posterior_mu_reg", "posterior_sd_reg", "regression_shrinkage",
        }
        assert expected <= set(table.columns)
        assert analysis.n_players == len(small_records)

    def test_rows_align_by_player(self, analysis, small_records) -> None:
        assert list(analysis.table["player"]) == [r.player for r in small_records]

    def test_global_conservation(self, analysis) -> None:
        table = analysis.table
        total = table["global_alpha"] + table["global_beta"]
        pd.testing.assert_series_equal(
            total, table["attempts"] + 61.8 + 106.2, check_names=False, check_dtype=False
        )

    def test_regression_conservation(self, analysis) -> None:
        table = analysis.table
        lhs = table["posterior_alpha"] + table["posterior_beta"]
        rhs = table["attempts"] + table["prior_alpha"] + table["prior_beta"]
        pd.testing.assert_series_equal(lhs, rhs, check_names=False, check_dtype=False)

    def test_shrinkage_columns(self, analysis) -> None:
        table = analysis.table
        pd.testing.assert_series_equal(
            table["regression_shrinkage"],
            table["pct"] - table["posterior_mu_reg"],
            check_names=False,
        )

    def test_estimated_prior(self, small_records) -> None:
        result = run_shrinkage_analysis(small_records, estimate_prior=True)
        assert result.prior != GlobalPrior(alpha=61.8, beta=106.2)
        assert 0.2 < result.prior.mean < 0.5

    def test_failed_fit_produces_nothing(self, small_records) -> None:
        with pytest.raises(NonConvergence):
            run_shrinkage_analysis(small_records, fitter=ScipyMaximumLikelihoodFitter(max_iter=2))


def test_analyze_shot_table_reports_rejections(small_records) -> None:
    df = pd.DataFrame(
        [{"player": r.player, "attempts": r.attempts, "made": r.made} for r in small_records]
        + [{"player": "Typo Row", "attempts": 10, "made": 15}]
    )
    result = analyze_shot_table(df)

    assert len(result.rejected) == 1
    assert "Typo Row" not in set(result.table["player"])
    assert result.n_players == len(small_records)


class TestReports:
    """Plots and summaries."""

    def test_plots_written(self, analysis, tmp_path) -> None:
        comparison = plot_shrinkage_comparison(
            analysis.table, tmp_path / "cmp.png", prior=analysis.prior
        )
        curve = plot_prior_mean_curve(analysis.model, analysis.table, tmp_path / "curve.png")

        assert comparison.exists() and comparison.stat().st_size > 0
        assert curve.exists() and curve.stat().st_size > 0

    def test_summary_is_json_serializable(self, analysis) -> None:
        summary = summarize_analysis(analysis, top_n=5)
        payload = json.loads(json.dumps(summary))

        assert payload["n_players"] == analysis.n_players
        assert len(payload["top_regression"]) == 5
        assert payload["regression_prior"]["sigma"] == pytest.approx(analysis.model.sigma)

    def test_leaderboards_sorted(self, analysis) -> None:
        summary = summarize_analysis(analysis, top_n=5)
        top = [row["posterior_mu_reg"] for row in summary["top_regression"]]
        bottom = [row["posterior_mu_reg"] for row in summary["bottom_regression"]]

        assert top == sorted(top, reverse=True)
        assert bottom == sorted(bottom)
        assert top[-1] >= bottom[-1]

    def test_format_report(self, analysis) -> None:
        text = format_report(summarize_analysis(analysis, top_n=3))
        assert "THREE-POINT SHRINKAGE REPORT" in text
        assert "Regression prior" in text
