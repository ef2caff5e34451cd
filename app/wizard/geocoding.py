"""
Résolution d'adresse en coordonnées, différée et protégée contre les
réponses hors d'ordre.
"""
from typing import Optional, Set
import logging

from app.core.config import settings
from app.models import GeocodingFailure, GeocodingState, GeocodingStatus, PropertyDraft
from app.wizard.scheduler import DebouncedTask, GenerationCounter
from app.wizard.state import DraftStore

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = {"address", "city", "state", "zip_code", "country"}
# Activer le mode adresse exacte relance aussi la résolution
TRIGGER_FIELDS = ADDRESS_FIELDS | {"show_exact_address"}


def compose_address(
    address: str = "",
    city: str = "",
    state: str = "",
    zip_code: str = "",
    country: str = ""
) -> str:
    """Adresse complète: composants non vides séparés par ", "."""
    parts = [address, city, state, zip_code, country]
    return ", ".join(part.strip() for part in parts if part and part.strip())


def compose_draft_address(draft: PropertyDraft) -> str:
    return compose_address(draft.address, draft.city, draft.state, draft.zip_code, draft.country)


def are_coordinates_valid(latitude: Optional[float], longitude: Optional[float]) -> bool:
    return (
        isinstance(latitude, (int, float))
        and isinstance(longitude, (int, float))
        and -90 <= latitude <= 90
        and -180 <= longitude <= 180
    )


class GeocodingResolver:
    """
    Maintient latitude/longitude cohérentes avec l'adresse.

    Une seule résolution par fenêtre d'inactivité; chaque appel porte une
    génération et seule la plus récente peut écrire dans le store.
    """

    def __init__(self, store: DraftStore, provider, delay: Optional[float] = None):
        self.store = store
        self.provider = provider
        self.status = GeocodingStatus()
        self._generations = GenerationCounter()
        self._task = DebouncedTask(
            name="geocoding",
            delay=settings.GEOCODING_DELAY if delay is None else delay,
            callback=self._resolve
        )

    @property
    def pending(self) -> bool:
        return self._task.pending

    @property
    def generation(self) -> int:
        return self._generations.latest

    def on_store_change(self, changed: Set[str]) -> None:
        """Observateur du store: réagit aux champs d'adresse."""
        if changed & TRIGGER_FIELDS:
            # L'adresse a changé: un appel en cours porte une adresse périmée
            self.cancel()
            self.request_resolution()

    def should_resolve(self, draft: PropertyDraft) -> bool:
        if not draft.show_exact_address:
            return False
        if not draft.city.strip() and not draft.address.strip():
            return False
        # Des coordonnées valides font foi
        if are_coordinates_valid(draft.latitude, draft.longitude):
            self.status = GeocodingStatus(state=GeocodingState.success)
            return False
        return True

    def request_resolution(self) -> bool:
        """
        Programme une résolution si le brouillon s'y prête.

        Returns:
            True si un appel a été (re)programmé
        """
        if not self.should_resolve(self.store.property_data):
            self._task.cancel()
            return False
        self._task.schedule()
        return True

    def cancel(self) -> None:
        """Annule le timer et invalide les appels en cours."""
        self._task.cancel()
        self._generations.next()
        if self.status.state == GeocodingState.loading:
            self.status = GeocodingStatus()

    def close(self) -> None:
        self.cancel()
        self._task.close()

    def mark_resolved(self) -> None:
        """Coordonnées fixées manuellement (carte, autocomplétion)."""
        self.cancel()
        self.status = GeocodingStatus(state=GeocodingState.success)

    async def _resolve(self) -> None:
        draft = self.store.property_data
        if not self.should_resolve(draft):
            return

        address = compose_draft_address(draft)
        generation = self._generations.next()
        self.status = GeocodingStatus(state=GeocodingState.loading)
        logger.info(f"Géocodage #{generation}: {address}")

        try:
            result = await self.provider.resolve(address)
        except Exception as e:
            result = GeocodingFailure(error=str(e) or "Failed to geocode address")

        if not self._generations.is_latest(generation):
            logger.debug(f"Réponse de géocodage périmée ignorée (#{generation})")
            return

        if isinstance(result, GeocodingFailure):
            logger.warning(f"⚠️ Géocodage échoué: {result.error}")
            self.status = GeocodingStatus.failed(result.error)
            return

        if not are_coordinates_valid(result.latitude, result.longitude):
            self.status = GeocodingStatus.failed("Invalid coordinates returned")
            return

        self.store.update_property_data({
            "latitude": result.latitude,
            "longitude": result.longitude
        })
        self.status = GeocodingStatus(state=GeocodingState.success)
        logger.info(f"✓ Géocodage #{generation}: ({result.latitude:.4f}, {result.longitude:.4f})")
