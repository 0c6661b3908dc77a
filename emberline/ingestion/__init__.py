"""
Emberline - Data Ingestion Module
Weather and species providers plus the resource catalog.
"""

from emberline.ingestion.weather_client import (
    WeatherClient,
    WeatherSnapshot,
    default_weather_snapshot,
    fetch_weather_with_fallback,
)
from emberline.ingestion.species_client import (
    SpeciesClient,
    SpeciesOccurrence,
    normalize_conservation_status,
)
from emberline.ingestion.resource_catalog import (
    Aircraft,
    CatalogWaterSource,
    FireStation,
    ResourceCatalog,
    default_resource_catalog,
    load_resource_catalog,
)

__all__ = [
    # Weather
    "WeatherClient",
    "WeatherSnapshot",
    "default_weather_snapshot",
    "fetch_weather_with_fallback",
    # Species
    "SpeciesClient",
    "SpeciesOccurrence",
    "normalize_conservation_status",
    # Resources
    "Aircraft",
    "CatalogWaterSource",
    "FireStation",
    "ResourceCatalog",
    "default_resource_catalog",
    "load_resource_catalog",
]
