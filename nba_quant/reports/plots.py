"""
Shrinkage comparison plots.

Figures compare raw, global-prior and regression-prior estimates against
attempts on a log x-axis. Files are written with the Agg backend so plotting
works headless.
"""

from pathlib import Path
from typing import Optional
import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from nba_quant.models.beta_binomial_regression import RegressionPriorModel
from nba_quant.models.conjugate import GlobalPrior

logger = logging.getLogger(__name__)


def plot_shrinkage_comparison(
    table: pd.DataFrame,
    output_path: Path,
    prior: Optional[GlobalPrior] = None,
) -> Path:
    """
    Three panels: raw %, global-shrinkage %, regression-shrinkage % vs attempts.

    Args:
        table: Analysis table with attempts, pct, global_mean, posterior_mu_reg
        output_path: PNG path
        prior: Global prior, drawn as a reference line when given

    Returns:
        output_path
    """
    panels = [
        ("pct", "Raw 3P%"),
        ("global_mean", "Global prior shrinkage"),
        ("posterior_mu_reg", "Regression prior shrinkage"),
    ]
    fig, axes = plt.subplots(1, 3, figsize=(16, 5), sharey=True)

    for ax, (column, title) in zip(axes, panels):
        ax.scatter(table["attempts"], table[column], s=12, alpha=0.6, color="steelblue")
        if prior is not None:
            ax.axhline(prior.mean, color="firebrick", linestyle="--", alpha=0.7,
                       label=f"Prior mean {prior.mean:.3f}")
            ax.legend(loc="lower right")
        ax.set_xscale("log")
        ax.set_title(title)
        ax.set_xlabel("3PA (log scale)")
        ax.grid(alpha=0.3)
    axes[0].set_ylabel("Estimated 3P%")

    plt.tight_layout()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Saved shrinkage comparison to {output_path}")
    return output_path


def plot_prior_mean_curve(
    model: RegressionPriorModel,
    table: pd.DataFrame,
    output_path: Path,
    n_points: int = 200,
) -> Path:
    """
    Fitted prior mean mu(attempts) over the observed attempts range, with raw
    percentages behind it.
    """
    grid = np.geomspace(max(table["attempts"].min(), 1), table["attempts"].max(), n_points)
    mu = model.linear_predictor(grid)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.scatter(table["attempts"], table["pct"], s=10, alpha=0.4, color="gray", label="Raw 3P%")
    ax.plot(grid, mu, color="firebrick", linewidth=2,
            label=f"mu = {model.mu_intercept:.3f} + {model.mu_slope:.3f} log(3PA)")
    ax.set_xscale("log")
    ax.set_xlabel("3PA (log scale)")
    ax.set_ylabel("3P%")
    ax.set_title(f"Regression prior mean (sigma = {model.sigma:.4f})")
    ax.legend(loc="lower right")
    ax.grid(alpha=0.3)

    plt.tight_layout()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Saved prior mean curve to {output_path}")
    return output_path
