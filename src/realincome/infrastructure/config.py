"""Application settings loaded from environment variables.

Variables use the ``REALINCOME_`` prefix (for example ``REALINCOME_CACHE_DIR`` or
``REALINCOME_CPI_LATEST_POLICY``) and may also be placed in a ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from realincome import __version__
from realincome.domain.models.source import LatestPeriodPolicy


class Settings(BaseSettings):
    """Runtime configuration for data sources, cache, and logging."""

    model_config = SettingsConfigDict(
        env_prefix="REALINCOME_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Cache
    cache_enabled: bool = True
    cache_dir: Path = Field(default_factory=lambda: Path.home() / ".cache" / "real-income")

    # IMF SDMX (monthly CPI index)
    sdmx_base_url: str = "https://api.imf.org/external/sdmx/2.1"
    sdmx_structure_base_url: str = "https://sdmxcentral.imf.org/ws/public/sdmxapi/rest"
    sdmx_user_agent: str = f"real-income/{__version__} (python httpx)"

    # IMF DataMapper (annual PCPIPCH)
    datamapper_base_url: str = "https://www.imf.org/external/datamapper/api/v1"
    datamapper_user_agent: str = "curl/8.5.0"

    # Transport
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_backoff_seconds: float = Field(default=0.5, ge=0)

    # Computation
    cpi_latest_policy: LatestPeriodPolicy = LatestPeriodPolicy.STRICT

    # Logging
    log_level: str = "WARNING"
    log_json: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
