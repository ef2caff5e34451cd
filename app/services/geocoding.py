"""
Fournisseur de géocodage (adresse -> coordonnées) via l'API backend.
"""
from typing import Any, Dict, Optional, Union
import asyncio
import logging

import requests

from app.core.config import settings
from app.models import GeocodingFailure, GeocodingResult
from app.wizard.errors import GeocodingError

logger = logging.getLogger(__name__)

GeocodingResponse = Union[GeocodingResult, GeocodingFailure]


def parse_geocoding_payload(data: Any) -> GeocodingResponse:
    """
    Interprète la réponse JSON du backend.

    Formats acceptés:
    - {"success": true, "coordinates": {"latitude": .., "longitude": ..}}
    - ancien format {"latitude"|"lat": .., "longitude"|"lng": ..}

    Toute autre forme devient un GeocodingFailure.
    """
    if not isinstance(data, dict):
        return GeocodingFailure(error="Invalid geocoding response")

    if not data.get("success", True) or data.get("error"):
        return GeocodingFailure(
            error=str(data.get("error") or "Geocoding failed"),
            details=data.get("details") if isinstance(data.get("details"), str) else None
        )

    coordinates = data.get("coordinates")
    if isinstance(coordinates, dict):
        latitude = coordinates.get("latitude")
        longitude = coordinates.get("longitude")
        formatted = data.get("address") or data.get("formattedAddress")
    else:
        latitude = data.get("latitude", data.get("lat"))
        longitude = data.get("longitude", data.get("lng"))
        formatted = data.get("formattedAddress") or data.get("formatted_address")

    if latitude is None or longitude is None:
        return GeocodingFailure(error="No match for address")

    try:
        return GeocodingResult(
            latitude=float(latitude),
            longitude=float(longitude),
            formatted_address=formatted if isinstance(formatted, str) else None
        )
    except (TypeError, ValueError):
        logger.warning(f"Coordonnées illisibles: {latitude!r}, {longitude!r}")
        return GeocodingFailure(error="Invalid coordinates returned")


class HttpGeocodingProvider:
    """
    Client HTTP du service de géocodage.
    resolve() ne lève jamais: toute erreur devient un GeocodingFailure.
    """

    def __init__(self, api_url: Optional[str] = None, timeout: Optional[float] = None):
        self.api_url = api_url or settings.GEOCODING_API_URL
        self.timeout = timeout or settings.GEOCODING_TIMEOUT

    async def resolve(self, address: str) -> GeocodingResponse:
        if not address or not address.strip():
            return GeocodingFailure(error="Address is required")
        try:
            data = await asyncio.to_thread(self._fetch, address)
        except GeocodingError as e:
            return GeocodingFailure(error=str(e), details=e.details)
        return parse_geocoding_payload(data)

    def _fetch(self, address: str) -> Dict[str, Any]:
        """
        Appel HTTP bloquant (exécuté dans un thread).

        Raises:
            GeocodingError: Erreur réseau, statut HTTP ou JSON invalide
        """
        try:
            logger.info(f"📡 Géocodage: {address}")
            response = requests.get(
                self.api_url,
                params={"address": address},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"❌ Exception géocodage: {e}")
            raise GeocodingError("Failed to geocode address", details=str(e)) from e

        if response.status_code != 200:
            logger.error(f"❌ Géocodage HTTP {response.status_code}")
            raise GeocodingError(
                "Failed to geocode address",
                details=f"{response.status_code} {response.reason}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise GeocodingError("Invalid geocoding response", details=str(e)) from e
