"""
Enregistrement et publication du brouillon dans le catalogue.
"""
from typing import Optional
import asyncio
import logging

from app.crud.property import draft_to_catalog_payload
from app.models import CatalogResponse, PropertyStatus, SubmissionResult
from app.wizard.errors import SubmissionError
from app.wizard.persistence import PersistenceManager
from app.wizard.state import DraftStore
from app.wizard.validation import get_missing_fields

logger = logging.getLogger(__name__)


class SubmissionOrchestrator:
    """
    Transforme le brouillon en requête "brouillon" ou "publication".

    Création si le brouillon n'a pas encore d'identifiant catalogue, mise à
    jour sinon: répéter un appel sur un brouillon inchangé ne crée pas de
    doublon. Les échecs du catalogue sont renvoyés dans le résultat, le
    brouillon reste intact.

    Les soumissions sont sérialisées: une seconde demande attend que la
    première ait enregistré l'identifiant catalogue avant de choisir entre
    création et mise à jour.
    """

    def __init__(self, store: DraftStore, persistence: PersistenceManager, catalog):
        self.store = store
        self.persistence = persistence
        self.catalog = catalog
        self.is_submitting = False
        self.last_error: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def draft_id(self) -> Optional[str]:
        return self.store.property_data.id

    async def save_draft(self) -> SubmissionResult:
        """Enregistre le brouillon (status=draft), sans validation."""
        async with self._lock:
            result = await self._submit(PropertyStatus.draft)
            if result.success:
                logger.info(f"✓ Brouillon enregistré ({self.draft_id})")
            return result

    async def publish_property(self) -> SubmissionResult:
        """
        Publie l'annonce avec le statut choisi par l'utilisateur.

        Les champs manquants sont signalés localement, sans appel réseau.
        Une publication réussie termine la session: l'enregistrement local
        est supprimé.
        """
        async with self._lock:
            missing = get_missing_fields(self.store.property_data)
            if missing:
                self.last_error = f"Missing required fields: {', '.join(missing)}"
                logger.info(f"Publication bloquée: {missing}")
                return SubmissionResult(success=False, error=self.last_error, missing_fields=missing)

            status = self.store.property_data.status
            result = await self._submit(status)
            if result.success:
                logger.info(f"✓ Annonce publiée ({self.draft_id}, {status.value})")
                self.persistence.delete_draft()
            return result

    def reset_property_data(self) -> None:
        self.persistence.delete_draft()

    async def _submit(self, status: PropertyStatus) -> SubmissionResult:
        draft = self.store.property_data
        payload = draft_to_catalog_payload(draft, status)

        self.is_submitting = True
        try:
            response = await self._send(draft.id, payload)
        except SubmissionError as e:
            self.last_error = str(e)
            logger.error(f"✗ Soumission refusée: {self.last_error}")
            return SubmissionResult(success=False, status=status.value, error=self.last_error)
        finally:
            self.is_submitting = False

        self.last_error = None
        catalog_id = (response.data or {}).get("id")
        if catalog_id is not None and str(catalog_id) != draft.id:
            self.store.update_property_data({"id": str(catalog_id)})

        return SubmissionResult(success=True, status=status.value, data=response.data)

    async def _send(self, draft_id: Optional[str], payload) -> CatalogResponse:
        """
        Création ou mise à jour selon l'identifiant catalogue.

        Raises:
            SubmissionError: Refus du catalogue ou erreur réseau
        """
        try:
            if draft_id:
                response = await asyncio.to_thread(self.catalog.update, draft_id, payload)
            else:
                response = await asyncio.to_thread(self.catalog.create, payload)
        except Exception as e:
            raise SubmissionError(str(e) or "Catalog unavailable") from e

        if not response.success:
            raise SubmissionError(response.error or "Submission failed")
        return response
