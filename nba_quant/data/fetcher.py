"""Season totals fetcher for Basketball-Reference three-point data."""

import logging
import time
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
import requests
from bs4 import BeautifulSoup, Comment

from nba_quant.config import settings

logger = logging.getLogger(__name__)

TOTALS_TABLE_IDS = ("totals_stats", "totals")

# Basketball-Reference data-stat attributes -> shot table columns.
# Both the current and the legacy attribute names are accepted.
COLUMN_MAPPING = {
    "name_display": "player",
    "player": "player",
    "fg3": "made",
    "fg3a": "attempts",
    "fg3_pct": "pct",
    "team_name_abbr": "team",
    "team_id": "team",
}

SHOT_COLUMNS = ["player", "attempts", "made", "pct"]

# Combined rows for players who changed teams mid-season
COMBINED_TEAM_MARKERS = {"TOT", "2TM", "3TM", "4TM", "5TM"}


class FetchError(Exception):
    """Raised when a totals page cannot be fetched or parsed."""


def extract_table(soup: BeautifulSoup, table_id: str) -> Optional[BeautifulSoup]:
    """Find a table by id, including tables hidden inside HTML comments."""
    table = soup.find("table", {"id": table_id})
    if table is not None:
        return table

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        if table_id in comment:
            table = BeautifulSoup(comment, "html.parser").find("table", {"id": table_id})
            if table is not None:
                return table
    return None


def parse_totals_table(table: BeautifulSoup) -> pd.DataFrame:
    """
    Parse a season totals table into player, attempts, made, pct columns.

    Repeated header rows are skipped. For players with several team rows the
    first row is kept, which Basketball-Reference lists as the season total.
    """
    rows: List[Dict[str, str]] = []
    tbody = table.find("tbody") or table

    for tr in tbody.find_all("tr"):
        if "thead" in tr.get("class", []) or tr.find("th", {"colspan": True}):
            continue

        row: Dict[str, str] = {}
        for cell in tr.find_all(["th", "td"]):
            column = COLUMN_MAPPING.get(cell.get("data-stat", ""))
            if column is None:
                continue
            row[column] = cell.get_text(strip=True)
            if column == "player":
                link = cell.find("a")
                if link is not None and "/players/" in link.get("href", ""):
                    row["player_id"] = link["href"].split("/")[-1].replace(".html", "")

        if row.get("player") and row.get("player") != "League Average":
            rows.append(row)

    df = pd.DataFrame(rows)
    if df.empty:
        return pd.DataFrame(columns=SHOT_COLUMNS)

    key = "player_id" if "player_id" in df.columns else "player"
    if "team" in df.columns:
        combined = df[df["team"].isin(COMBINED_TEAM_MARKERS)][key].unique()
        df = df[~(df[key].isin(combined) & ~df["team"].isin(COMBINED_TEAM_MARKERS))]
    df = df.drop_duplicates(subset=key, keep="first")

    for column in ("attempts", "made", "pct"):
        if column not in df.columns:
            df[column] = pd.NA
        df[column] = pd.to_numeric(df[column], errors="coerce")

    return df[SHOT_COLUMNS].reset_index(drop=True)


class ShotDataFetcher:
    """Fetches per-player three-point totals for a season."""

    def __init__(self, cache_dir: Optional[Path] = None) -> None:
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": settings.USER_AGENT})
        self.cache_dir = cache_dir or settings.RAW_DATA_DIR

    def _fetch_with_retries(self, url: str) -> str:
        """Fetch page text with retry and exponential backoff."""
        max_retries = settings.REQUEST_RETRIES
        for attempt in range(max_retries):
            try:
                resp = self.session.get(url, timeout=settings.REQUEST_TIMEOUT)
                resp.raise_for_status()
                return resp.text
            except requests.exceptions.RequestException as e:
                if attempt < max_retries - 1:
                    wait_time = settings.REQUEST_BACKOFF ** attempt
                    logger.warning(
                        f"Fetch failed (attempt {attempt + 1}/{max_retries}): {e}. "
                        f"Retrying in {wait_time}s..."
                    )
                    time.sleep(wait_time)
                else:
                    logger.error(f"Fetch failed after {max_retries} attempts: {url}")
                    raise FetchError(f"Failed to fetch {url}: {e}") from e
        raise FetchError(f"No fetch attempts made for {url}")

    def cache_path(self, season: int) -> Path:
        return Path(self.cache_dir) / f"three_point_totals_{season}.csv"

    def fetch_season_totals(self, season: int, use_cache: bool = True) -> pd.DataFrame:
        """
        Fetch the season totals table and reduce it to three-point columns.

        Args:
            season: Season ending year (2024 = 2023-24)
            use_cache: Read/write the CSV cache under the raw data dir

        Returns:
            DataFrame with player, attempts, made, pct
        """
        cache_file = self.cache_path(season)
        if use_cache and cache_file.exists():
            logger.info(f"Loading cached totals from {cache_file}")
            return load_shot_table(cache_file)

        url = f"{settings.BASE_URL}/leagues/NBA_{season}_totals.html"
        logger.info(f"Fetching three-point totals for {season} from {url}")
        soup = BeautifulSoup(self._fetch_with_retries(url), "html.parser")

        table = None
        for table_id in TOTALS_TABLE_IDS:
            table = extract_table(soup, table_id)
            if table is not None:
                break
        if table is None:
            raise FetchError(f"Could not find totals table for {season}")

        df = parse_totals_table(table)
        logger.info(f"Parsed {len(df)} players for {season}")

        if use_cache:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(cache_file, index=False)
            logger.info(f"Cached totals to {cache_file}")
        return df


def load_shot_table(path: Path, mapping: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """
    Load a shot table from CSV.

    Args:
        path: CSV file path
        mapping: Optional {source_column: shot_column} renames, e.g.
            {"3PA": "attempts", "3P": "made", "Player": "player"}

    Returns:
        DataFrame with at least player, attempts, made
    """
    df = pd.read_csv(path)
    if mapping:
        df = df.rename(columns=mapping)
    logger.info(f"Loaded {len(df)} shot rows from {path}")
    return df
