"""
Session de l'assistant: assemble le store et ses collaborateurs.
"""
from typing import Any, Dict, Optional
import logging

from app.models import PropertyDraft, WizardStep
from app.wizard.ai_summary import AISummaryGenerator, apply_suggestion
from app.wizard.features import FeatureManager
from app.wizard.geocoding import GeocodingResolver
from app.wizard.images import ImageCollectionManager
from app.wizard.navigator import StepNavigator, display_ordinal
from app.wizard.persistence import LocalDraftStorage, PersistenceManager, draft_key
from app.wizard.state import DraftStore
from app.wizard.submission import SubmissionOrchestrator
from app.wizard.uploads import UploadWidgetBridge
from app.wizard.validation import get_missing_fields

logger = logging.getLogger(__name__)


class WizardSession:
    """
    Cycle de vie d'une création d'annonce.

    Créée au montage (neuve ou restaurée), modifiée en continu, détruite
    par la suppression du brouillon ou une publication réussie.
    """

    def __init__(
        self,
        key: str,
        storage: LocalDraftStorage,
        geocoder,
        catalog,
        summary_generator: Optional[AISummaryGenerator] = None,
        autosave_delay: Optional[float] = None,
        geocoding_delay: Optional[float] = None,
        max_images: Optional[int] = None
    ):
        self.key = key
        self.store = DraftStore()
        self.navigator = StepNavigator(self.store)
        self.persistence = PersistenceManager(self.store, storage, key, delay=autosave_delay)
        self.geocoding = GeocodingResolver(self.store, geocoder, delay=geocoding_delay)
        self.images = ImageCollectionManager(self.store, max_images=max_images)
        self.uploads = UploadWidgetBridge(self.images)
        self.features = FeatureManager(self.store)
        self.submission = SubmissionOrchestrator(self.store, self.persistence, catalog)
        self.summary_generator = summary_generator or AISummaryGenerator()
        self.restored = False
        self.closed = False

        # Persistance d'abord, puis géocodage
        self.store.subscribe(self.persistence.on_store_change)
        self.store.subscribe(self.geocoding.on_store_change)

    @classmethod
    def open(
        cls,
        user_key: Optional[str],
        storage: LocalDraftStorage,
        geocoder,
        catalog,
        **kwargs
    ) -> "WizardSession":
        """Monte l'assistant: restaure le brouillon local s'il existe."""
        session = cls(draft_key(user_key), storage, geocoder, catalog, **kwargs)
        session.restored = session.persistence.restore_into_store()
        logger.info(f"Session {session.key} ouverte ({'restaurée' if session.restored else 'neuve'})")
        return session

    # Raccourcis vers le store
    @property
    def property_data(self) -> PropertyDraft:
        return self.store.property_data

    @property
    def current_step(self) -> WizardStep:
        return self.store.current_step

    def update_property_data(self, partial: Dict[str, Any]) -> PropertyDraft:
        return self.store.update_property_data(partial)

    def reset_property_data(self) -> None:
        self.delete_draft()

    def set_exact_address_mode(self, enabled: bool) -> None:
        """Mode adresse exacte; le désactiver efface l'adresse."""
        updates: Dict[str, Any] = {"show_exact_address": enabled}
        if not enabled:
            updates["address"] = ""
        self.store.update_property_data(updates)

    def set_coordinates(self, latitude: float, longitude: float) -> None:
        """Coordonnées choisies manuellement (carte ou autocomplétion)."""
        self.store.update_property_data({"latitude": latitude, "longitude": longitude})
        self.geocoding.mark_resolved()

    async def generate_summary(self, apply: bool = False):
        suggestion = await self.summary_generator.generate(self.store.property_data)
        if apply and not suggestion.error:
            apply_suggestion(self.store, suggestion)
        return suggestion

    def delete_draft(self) -> None:
        """Suppression explicite: timers annulés, enregistrement effacé."""
        self.geocoding.cancel()
        self.persistence.delete_draft()

    def close(self, flush: bool = False) -> None:
        """
        Quitte l'assistant: plus aucun callback ne doit s'exécuter.

        Args:
            flush: Écrire d'abord la sauvegarde en attente
        """
        if self.closed:
            return
        if flush:
            self.persistence.flush()
        self.persistence.close()
        self.geocoding.close()
        self.uploads.close()
        self.closed = True
        logger.info(f"Session {self.key} fermée")

    def snapshot(self) -> Dict[str, Any]:
        """État exposé à l'interface."""
        draft = self.store.property_data
        return {
            "key": self.key,
            "restored": self.restored,
            "currentStep": self.current_step.value,
            "displayStep": display_ordinal(self.current_step),
            "propertyData": draft.model_dump(mode="json", by_alias=True),
            "steps": [info.model_dump(mode="json") for info in self.navigator.get_steps()],
            "missingFields": get_missing_fields(draft),
            "geocoding": self.geocoding.status.model_dump(mode="json"),
            "savePending": self.persistence.save_pending,
            "isSubmitting": self.submission.is_submitting,
            "remainingImageSlots": self.images.remaining_slots,
            "uploadError": str(self.uploads.last_error) if self.uploads.last_error else None,
        }


class WizardSessionManager:
    """Cache des sessions actives, une par clé utilisateur."""

    def __init__(
        self,
        storage: LocalDraftStorage,
        geocoder,
        catalog,
        **session_kwargs
    ):
        self.storage = storage
        self.geocoder = geocoder
        self.catalog = catalog
        self.session_kwargs = session_kwargs
        self._sessions: Dict[str, WizardSession] = {}

    def open(self, user_key: Optional[str] = None) -> WizardSession:
        key = draft_key(user_key)
        session = self._sessions.get(key)
        if session is None or session.closed:
            session = WizardSession.open(
                user_key, self.storage, self.geocoder, self.catalog, **self.session_kwargs
            )
            self._sessions[key] = session
        return session

    def get(self, user_key: Optional[str] = None) -> Optional[WizardSession]:
        return self._sessions.get(draft_key(user_key))

    def drop(self, user_key: Optional[str] = None, flush: bool = False) -> None:
        session = self._sessions.pop(draft_key(user_key), None)
        if session is not None:
            session.close(flush=flush)

    def close_all(self) -> None:
        for session in list(self._sessions.values()):
            session.close(flush=True)
        self._sessions.clear()

    def get_active_sessions_count(self) -> int:
        return len(self._sessions)
