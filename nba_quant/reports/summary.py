"""Text and JSON summaries of a shrinkage analysis."""

from typing import Any, Dict, List, Optional
import logging

import pandas as pd

from nba_quant.config import settings
from nba_quant.pipeline import ShrinkageAnalysis

logger = logging.getLogger(__name__)

LEADERBOARD_COLUMNS = ["player", "attempts", "made", "pct", "global_mean", "posterior_mu_reg"]


def _leaderboard(table: pd.DataFrame, column: str, top_n: int, ascending: bool) -> List[Dict[str, Any]]:
    ranked = table.sort_values(column, ascending=ascending).head(top_n)
    return [
        {
            "player": str(row.player),
            "attempts": int(row.attempts),
            "made": int(row.made),
            "pct": float(row.pct),
            "global_mean": float(row.global_mean),
            "posterior_mu_reg": float(row.posterior_mu_reg),
        }
        for row in ranked[LEADERBOARD_COLUMNS].itertuples(index=False)
    ]


def summarize_analysis(analysis: ShrinkageAnalysis, top_n: Optional[int] = None) -> Dict[str, Any]:
    """
    Summary statistics, fitted parameters and leaderboards.

    Returns:
        JSON-serializable dict
    """
    top_n = top_n or settings.REPORT_TOP_N
    table = analysis.table
    model = analysis.model

    return {
        "n_players": int(len(table)),
        "n_rejected": len(analysis.rejected),
        "global_prior": {
            "alpha": analysis.prior.alpha,
            "beta": analysis.prior.beta,
            "mean": analysis.prior.mean,
        },
        "regression_prior": {
            "mu_intercept": model.mu_intercept,
            "mu_slope": model.mu_slope,
            "sigma": model.sigma,
            "log_likelihood": model.log_likelihood,
            "aic": model.aic,
            "n_iterations": model.n_iterations,
        },
        "mean_abs_shrinkage": {
            "global": float(table["global_shrinkage"].abs().mean()),
            "regression": float(table["regression_shrinkage"].abs().mean()),
        },
        "top_regression": _leaderboard(table, "posterior_mu_reg", top_n, ascending=False),
        "bottom_regression": _leaderboard(table, "posterior_mu_reg", top_n, ascending=True),
        "top_raw": _leaderboard(table, "pct", top_n, ascending=False),
    }


def _format_board(title: str, rows: List[Dict[str, Any]]) -> List[str]:
    lines = [title, "-" * 72]
    lines.append(f"{'Player':<26}{'3PA':>6}{'3P':>6}{'Raw':>9}{'Global':>9}{'Regr':>9}")
    for row in rows:
        lines.append(
            f"{str(row['player'])[:25]:<26}{row['attempts']:>6}{row['made']:>6}"
            f"{row['pct']:>9.3f}{row['global_mean']:>9.3f}{row['posterior_mu_reg']:>9.3f}"
        )
    return lines


def format_report(summary: Dict[str, Any]) -> str:
    """Human-readable report from summarize_analysis output."""
    prior = summary["global_prior"]
    reg = summary["regression_prior"]
    lines = [
        "=" * 72,
        "THREE-POINT SHRINKAGE REPORT",
        "=" * 72,
        f"Players: {summary['n_players']} (rejected rows: {summary['n_rejected']})",
        f"Global prior: Beta({prior['alpha']:.2f}, {prior['beta']:.2f}), mean {prior['mean']:.4f}",
        (
            f"Regression prior: mu = {reg['mu_intercept']:.4f} + {reg['mu_slope']:.4f} * log(3PA), "
            f"sigma = {reg['sigma']:.5f}"
        ),
        f"  logLik = {reg['log_likelihood']:.2f}, AIC = {reg['aic']:.2f}",
        (
            f"Mean |raw - estimate|: global {summary['mean_abs_shrinkage']['global']:.4f}, "
            f"regression {summary['mean_abs_shrinkage']['regression']:.4f}"
        ),
        "",
    ]
    lines += _format_board("Best shooters (regression estimate)", summary["top_regression"])
    lines.append("")
    lines += _format_board("Worst shooters (regression estimate)", summary["bottom_regression"])
    lines.append("")
    lines += _format_board("Best raw percentages", summary["top_raw"])
    return "\n".join(lines)
