"""
Emberline - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBERLINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # External providers
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"
    gbif_api_url: str = "https://api.gbif.org/v1/occurrence/search"
    http_timeout_seconds: float = 10.0
    provider_timeout_seconds: float = 5.0
    species_search_radius_km: float = 25.0
    species_page_size: int = 100

    # Simulation (demo data paths)
    simulation_seed: Optional[int] = 42

    # Default incident location (Madrid)
    default_latitude: float = 40.4168
    default_longitude: float = -3.7038

    # Resource allocation
    resource_catalog_path: Optional[str] = None
    max_surfaced_stations: int = 5
    max_surfaced_aircraft: int = 3
    max_surfaced_water_sources: int = 5

    # Zone monitoring
    poll_interval_seconds: float = 60.0
    monitor_autostart: bool = True

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
