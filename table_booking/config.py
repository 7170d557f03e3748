from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings sourced from ``TABLE_BOOKING_*`` environment variables."""

    DATA_DIR: str = "data"
    SLOT_STEP_MINUTES: int = 30
    DEFAULT_DURATION_HOURS: float = 2.0
    MAX_DURATION_HOURS: float = 8.0
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 5000

    model_config = SettingsConfigDict(env_prefix="TABLE_BOOKING_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
