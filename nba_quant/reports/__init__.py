"""Plots and summaries for shrinkage analyses."""

from .plots import plot_prior_mean_curve, plot_shrinkage_comparison
from .summary import format_report, summarize_analysis

__all__ = [
    "plot_prior_mean_curve",
    "plot_shrinkage_comparison",
    "format_report",
    "summarize_analysis",
]
