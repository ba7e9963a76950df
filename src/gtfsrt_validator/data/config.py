from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ValidatorConfig(BaseSettings):
    """Configuration for feed fetching, reference data and rule thresholds.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    feed_url: str | None = Field(default=None, alias="GTFSRT_FEED_URL")
    api_key: str | None = Field(default=None, alias="GTFSRT_API_KEY")
    http_timeout_seconds: float = Field(default=30.0, alias="GTFSRT_HTTP_TIMEOUT")

    # SQLite database holding the static GTFS schedule
    db_path: Path = Field(default=Path("data/gtfs.db"), alias="GTFSRT_DB_PATH")

    # Plausible vehicle speed range in meters/second (W004); 44.7 m/s is ~100 mph
    min_speed: float = Field(default=0.0, alias="GTFSRT_MIN_SPEED")
    max_speed: float = Field(default=44.7, alias="GTFSRT_MAX_SPEED")


@lru_cache
def get_validator_config() -> ValidatorConfig:
    """Get validator configuration (cached singleton).

    Returns:
        ValidatorConfig with values from .env file or environment variables.
    """
    return ValidatorConfig()
