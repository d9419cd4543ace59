"""
Configuration management for resmeasures.
"""

import logging
import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings.

    Can be configured via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="RESMEASURES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default=Path("data"))
    weather_dir: Path = Field(default=Path("weather"), description="EPW weather files and data.csv")
    measures_dir: Path = Field(default=Path("measures"), description="Measures referenced by generated workflows")

    # Simulation CLI
    openstudio_path: str | None = Field(default=None, description="Path to the openstudio executable")
    job_timeout_seconds: int = Field(default=3600, description="Maximum runtime of one simulation job")

    # Batch execution
    max_workers: int | None = Field(default=None, description="Worker pool size (default: CPU count)")
    download_timeout_seconds: int = Field(default=600, description="Weather zip download timeout")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")

    @property
    def cache_dir(self) -> Path:
        return self.data_dir / "cache"

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for dir_path in [
            self.data_dir,
            self.cache_dir,
            self.weather_dir,
        ]:
            dir_path.mkdir(parents=True, exist_ok=True)


def get_max_workers() -> int:
    """
    Number of parallel workers for batch runs.

    Reads MAX_PARALLEL_WORKERS first, then the settings value, then the CPU count.
    """
    env_value = os.environ.get("MAX_PARALLEL_WORKERS")
    if env_value:
        try:
            return max(1, int(env_value))
        except ValueError:
            logger.warning(f"Ignoring invalid MAX_PARALLEL_WORKERS={env_value!r}")
    if settings.max_workers:
        return max(1, settings.max_workers)
    return os.cpu_count() or 1


# Global settings instance
settings = Settings()
