"""geoio configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``GEOIO_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GEOIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # GADM downloads
    gadm_base_url: str = "https://geodata.ucdavis.edu/gadm/gadm4.1/json"
    gadm_version: str = "41"
    gadm_timeout_seconds: float = 60.0

    # Logging
    log_level: str = "info"


settings = Settings()
