"""
Emberline - Species Occurrence Client
Queries the GBIF occurrence search API for species recorded inside a
bounding box.
Documentation: https://www.gbif.org/developer/occurrence
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from emberline.core.config import settings
from emberline.core.exceptions import ProviderError
from emberline.core.geo_utils import BoundingBox

logger = logging.getLogger(__name__)

# GBIF reports IUCN categories either as codes or as enum names
IUCN_CATEGORY_CODES: Dict[str, str] = {
    "LC": "LC",
    "LEAST_CONCERN": "LC",
    "NT": "NT",
    "NEAR_THREATENED": "NT",
    "VU": "VU",
    "VULNERABLE": "VU",
    "EN": "EN",
    "ENDANGERED": "EN",
    "CR": "CR",
    "CRITICALLY_ENDANGERED": "CR",
}


def _text(value: Any) -> Optional[str]:
    """Stripped string value, None for anything else or blank."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def normalize_conservation_status(value: Any) -> str:
    """
    Map a provider category onto LC/NT/VU/EN/CR.

    Unassessed or data-deficient species (NE, DD, missing, non-text) count
    as LC.
    """
    text = _text(value)
    if text is None:
        return "LC"
    return IUCN_CATEGORY_CODES.get(text.upper().replace(" ", "_"), "LC")


@dataclass(frozen=True)
class SpeciesOccurrence:
    """A single occurrence record."""
    scientific_name: str
    kingdom: str
    class_name: Optional[str]
    conservation_status: str
    latitude: float
    longitude: float
    vernacular_name: Optional[str] = None

    @property
    def is_plant(self) -> bool:
        return self.kingdom.lower() == "plantae"

    @property
    def is_animal(self) -> bool:
        return self.kingdom.lower() == "animalia"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scientific_name": self.scientific_name,
            "vernacular_name": self.vernacular_name,
            "kingdom": self.kingdom,
            "class": self.class_name,
            "conservation_status": self.conservation_status,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


class SpeciesClient:
    """Async client for the GBIF occurrence search endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.gbif_api_url
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.page_size = page_size or settings.species_page_size
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def search_occurrences(self, bbox: BoundingBox) -> List[SpeciesOccurrence]:
        """
        Search occurrences with coordinates inside a bounding box.

        Args:
            bbox: Area to search

        Returns:
            Occurrence records, possibly empty

        Raises:
            ProviderError: on HTTP failure or a malformed payload
        """
        params = {
            "decimalLatitude": f"{bbox.south},{bbox.north}",
            "decimalLongitude": f"{bbox.west},{bbox.east}",
            "hasCoordinate": "true",
            "limit": self.page_size,
        }

        try:
            response = await self._get_client().get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise ProviderError("gbif", str(e)) from e
        except ValueError as e:
            raise ProviderError("gbif", f"invalid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise ProviderError("gbif", "response has no results list")

        occurrences = []
        for record in data["results"]:
            occurrence = self._parse_record(record)
            if occurrence is not None:
                occurrences.append(occurrence)

        logger.debug(f"GBIF returned {len(occurrences)} usable occurrences")
        return occurrences

    @staticmethod
    def _parse_record(record: Any) -> Optional[SpeciesOccurrence]:
        if not isinstance(record, dict):
            return None
        name = _text(record.get("species")) or _text(record.get("scientificName"))
        lat = record.get("decimalLatitude")
        lon = record.get("decimalLongitude")
        if not name or lat is None or lon is None:
            return None
        try:
            latitude = float(lat)
            longitude = float(lon)
        except (TypeError, ValueError):
            return None

        return SpeciesOccurrence(
            scientific_name=name,
            kingdom=_text(record.get("kingdom")) or "Unknown",
            class_name=_text(record.get("class")),
            conservation_status=normalize_conservation_status(
                record.get("iucnRedListCategory")
            ),
            latitude=latitude,
            longitude=longitude,
            vernacular_name=_text(record.get("vernacularName")),
        )
