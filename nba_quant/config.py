"""Configuration and constants for the NBA Quant shrinkage pipeline."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global settings for the NBA Quant pipeline."""

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    DATA_DIR: Path = PROJECT_ROOT / "data"
    RAW_DATA_DIR: Path = DATA_DIR / "raw"
    REPORTS_DIR: Path = PROJECT_ROOT / "reports"

    # Season (Basketball-Reference labels a season by its ending year)
    SEASON: int = 2024

    # HTTP configuration
    BASE_URL: str = "https://www.basketball-reference.com"
    USER_AGENT: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    REQUEST_TIMEOUT: int = 30
    REQUEST_RETRIES: int = 3
    REQUEST_BACKOFF: float = 2.0

    # Global Beta prior on three-point percentage, pinned from prior analysis
    PRIOR_ALPHA: float = 61.8
    PRIOR_BETA: float = 106.2

    # Modeling
    MIN_ATTEMPTS: int = 1  # log(attempts) needs attempts >= 1
    PRIOR_FIT_MIN_ATTEMPTS: int = 100
    FIT_TOLERANCE: float = 1e-7
    FIT_MAX_ITER: int = 10000
    CREDIBLE_LEVEL: float = 0.95

    # Reports
    REPORT_TOP_N: int = 10

    # Optional override for cached totals tables
    SHOT_TABLE_PATH: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="NBA_QUANT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    def ensure_dirs(self) -> None:
        """Ensure all required directories exist."""
        for dir_path in [self.DATA_DIR, self.RAW_DATA_DIR, self.REPORTS_DIR]:
            dir_path.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
