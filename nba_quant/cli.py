"""Command-line interface for the NBA Quant shrinkage pipeline."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer

from nba_quant.config import settings
from nba_quant.data.fetcher import FetchError, ShotDataFetcher, load_shot_table
from nba_quant.data.records import normalize_shot_table
from nba_quant.exceptions import InvalidInput, ShrinkageError
from nba_quant.models.beta_binomial_regression import BetaBinomialRegression, RegressionPriorModel
from nba_quant.models.conjugate import GlobalPrior
from nba_quant.models.prediction import PredictionService
from nba_quant.pipeline import analyze_shot_table
from nba_quant.reports.plots import plot_prior_mean_curve, plot_shrinkage_comparison
from nba_quant.reports.summary import format_report, summarize_analysis

app = typer.Typer(help="Empirical Bayes three-point shooting estimates")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

CLI_ERRORS = (ShrinkageError, FetchError, FileNotFoundError, KeyError, ValueError)


def _parse_mapping(entries: List[str]) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise typer.BadParameter(f"Invalid mapping entry '{entry}', expected source=target")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _resolve_prior(alpha: Optional[float], beta: Optional[float]) -> GlobalPrior:
    return GlobalPrior(
        alpha=alpha if alpha is not None else settings.PRIOR_ALPHA,
        beta=beta if beta is not None else settings.PRIOR_BETA,
    )


@app.command()
def fetch(
    season: int = typer.Option(settings.SEASON, help="Season ending year (2024 = 2023-24)"),
    output: Optional[Path] = typer.Option(None, help="CSV output path"),
    refresh: bool = typer.Option(False, help="Ignore the cached table"),
) -> None:
    """Fetch a season's per-player three-point totals from Basketball-Reference.

    Examples:
        nba-quant fetch --season 2024
        nba-quant fetch --season 2024 --output data/threes_2024.csv
    """
    try:
        settings.ensure_dirs()
        df = ShotDataFetcher().fetch_season_totals(season, use_cache=not refresh)
        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(output, index=False)
        typer.echo(f"Fetched {len(df)} players for {season}" + (f" -> {output}" if output else ""))
    except CLI_ERRORS as e:
        logger.error(f"Fetch failed: {e}")
        raise typer.Exit(code=1)


@app.command()
def fit(
    input: Path = typer.Option(..., help="Shot table CSV (player, attempts, made)"),
    output: Path = typer.Option(Path("regression_prior.json"), help="Model JSON output path"),
    min_attempts: int = typer.Option(settings.MIN_ATTEMPTS, help="Minimum attempts to keep a player"),
    column: List[str] = typer.Option([], help="Column rename, e.g. 3PA=attempts"),
) -> None:
    """Fit the beta-binomial regression prior and save it as JSON."""
    try:
        df = load_shot_table(input, mapping=_parse_mapping(column))
        normalized = normalize_shot_table(df, min_attempts=min_attempts)
        model = BetaBinomialRegression().fit(normalized.records)
        output.parent.mkdir(parents=True, exist_ok=True)
        model.save(output)
        typer.echo(
            f"mu = {model.mu_intercept:.4f} + {model.mu_slope:.4f} * log(attempts), "
            f"sigma = {model.sigma:.5f} ({model.n_obs} players) -> {output}"
        )
    except CLI_ERRORS as e:
        logger.error(f"Fit failed: {e}")
        raise typer.Exit(code=1)


@app.command()
def shrink(
    input: Path = typer.Option(..., help="Shot table CSV (player, attempts, made)"),
    output: Path = typer.Option(Path("shrinkage.csv"), help="Output CSV path"),
    alpha: Optional[float] = typer.Option(None, help="Global prior alpha"),
    beta: Optional[float] = typer.Option(None, help="Global prior beta"),
    estimate_prior: bool = typer.Option(False, help="Estimate the global prior from the data"),
    min_attempts: int = typer.Option(settings.MIN_ATTEMPTS, help="Minimum attempts to keep a player"),
    column: List[str] = typer.Option([], help="Column rename, e.g. 3PA=attempts"),
) -> None:
    """Compute raw, global-shrinkage and regression-shrinkage estimates."""
    try:
        df = load_shot_table(input, mapping=_parse_mapping(column))
        analysis = analyze_shot_table(
            df,
            min_attempts=min_attempts,
            prior=_resolve_prior(alpha, beta),
            estimate_prior=estimate_prior,
        )
        output.parent.mkdir(parents=True, exist_ok=True)
        analysis.table.to_csv(output, index=False)
        typer.echo(f"Wrote estimates for {analysis.n_players} players to {output}")
        if analysis.rejected:
            typer.echo(f"Rejected {len(analysis.rejected)} invalid rows")
    except CLI_ERRORS as e:
        logger.error(f"Shrink failed: {e}")
        raise typer.Exit(code=1)


@app.command()
def predict(
    model: Path = typer.Option(..., help="Model JSON written by `fit`"),
    attempts: int = typer.Option(..., help="Three-point attempts"),
    made: int = typer.Option(..., help="Three-point makes"),
    player: Optional[str] = typer.Option(None, help="Optional player label"),
) -> None:
    """Posterior estimate for a player not in the training set."""
    try:
        fitted = RegressionPriorModel.load(model)
        record = PredictionService(fitted).predict(attempts, made, player=player)
        typer.echo(record.model_dump_json(indent=2))
    except InvalidInput as e:
        logger.error(f"Invalid prediction request: {e}")
        raise typer.Exit(code=1)
    except CLI_ERRORS as e:
        logger.error(f"Prediction failed: {e}")
        raise typer.Exit(code=1)


@app.command()
def report(
    input: Path = typer.Option(..., help="Shot table CSV (player, attempts, made)"),
    output_dir: Path = typer.Option(settings.REPORTS_DIR, help="Directory for plots and summaries"),
    top_n: int = typer.Option(settings.REPORT_TOP_N, help="Players per leaderboard"),
    alpha: Optional[float] = typer.Option(None, help="Global prior alpha"),
    beta: Optional[float] = typer.Option(None, help="Global prior beta"),
    column: List[str] = typer.Option([], help="Column rename, e.g. 3PA=attempts"),
) -> None:
    """Write comparison plots, a text report and a JSON summary."""
    try:
        df = load_shot_table(input, mapping=_parse_mapping(column))
        analysis = analyze_shot_table(df, prior=_resolve_prior(alpha, beta))

        output_dir.mkdir(parents=True, exist_ok=True)
        plot_shrinkage_comparison(analysis.table, output_dir / "shrinkage_comparison.png", prior=analysis.prior)
        plot_prior_mean_curve(analysis.model, analysis.table, output_dir / "prior_mean_curve.png")

        summary = summarize_analysis(analysis, top_n=top_n)
        (output_dir / "summary.json").write_text(json.dumps(summary, indent=2), encoding="utf-8")
        text = format_report(summary)
        (output_dir / "report.txt").write_text(text, encoding="utf-8")
        typer.echo(text)
        typer.echo(f"Report written to {output_dir}")
    except CLI_ERRORS as e:
        logger.error(f"Report failed: {e}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
