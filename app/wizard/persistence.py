"""
Persistance locale du brouillon.
Sauvegarde différée, restauration au montage, suppression immédiate.
"""
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from pathlib import Path
import json
import logging
import os
import re

from pydantic import ValidationError

from app.core.config import settings
from app.models import DraftRecord, PropertyDraft, WizardStep, normalize_images
from app.wizard.errors import PersistenceError
from app.wizard.scheduler import DebouncedTask
from app.wizard.state import DraftStore

logger = logging.getLogger(__name__)


def draft_key(user_key: Optional[str] = None, prefix: Optional[str] = None) -> str:
    """Clé de l'enregistrement local pour un utilisateur/session."""
    prefix = prefix or settings.DRAFT_KEY_PREFIX
    return f"{prefix}:{user_key}" if user_key else prefix


class LocalDraftStorage:
    """
    Stockage durable local: un fichier JSON par clé.
    Réécriture complète à chaque sauvegarde, suppression complète.
    """

    def __init__(self, directory: Optional[str] = None):
        self.directory = Path(directory or settings.DRAFT_STORAGE_DIR)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe}.json"

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Lit un enregistrement.

        Returns:
            Contenu décodé ou None si absent

        Raises:
            PersistenceError: Fichier illisible ou JSON invalide
        """
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Lecture impossible de {path}: {e}") from e

    def write(self, key: str, record: Dict[str, Any]) -> None:
        """Écrit l'enregistrement de façon atomique."""
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(record, f, ensure_ascii=False)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Écriture impossible de {path}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Suppression impossible: {e}") from e


class PersistenceManager:
    """
    Survit aux rechargements sans perdre le brouillon en cours.

    Chaque mutation du store programme une sauvegarde différée; les échecs
    d'écriture sont journalisés et n'interrompent jamais l'édition.
    """

    def __init__(
        self,
        store: DraftStore,
        storage: LocalDraftStorage,
        key: str,
        delay: Optional[float] = None
    ):
        self.store = store
        self.storage = storage
        self.key = key
        self.last_saved_at: Optional[datetime] = None
        self._task = DebouncedTask(
            name=f"autosave[{key}]",
            delay=settings.AUTOSAVE_DELAY if delay is None else delay,
            callback=self.save_now
        )

    @property
    def save_pending(self) -> bool:
        return self._task.pending

    def on_store_change(self, changed) -> None:
        """Observateur du store: toute mutation programme une sauvegarde."""
        self.schedule_save()

    def schedule_save(self) -> None:
        self._task.schedule()

    def build_record(self) -> DraftRecord:
        return DraftRecord(
            draft=self.store.property_data,
            current_step=self.store.current_step,
            saved_at=datetime.now(timezone.utc)
        )

    def save_now(self) -> bool:
        """
        Écrit immédiatement le brouillon et l'étape courante.

        Returns:
            True si l'écriture a réussi
        """
        record = self.build_record()
        try:
            self.storage.write(self.key, record.model_dump(mode="json", by_alias=True))
        except PersistenceError as e:
            # La prochaine sauvegarde réussie rattrapera l'état
            logger.error(f"✗ Sauvegarde locale échouée: {e}")
            return False

        self.last_saved_at = record.saved_at
        logger.debug(f"💾 Brouillon {self.key} sauvegardé ({record.current_step.value})")
        return True

    def restore(self) -> Optional[DraftRecord]:
        """
        Charge l'enregistrement local s'il existe.

        Un enregistrement illisible ou invalide est supprimé.

        Returns:
            Enregistrement restauré ou None
        """
        try:
            raw = self.storage.read(self.key)
        except PersistenceError as e:
            logger.error(f"✗ Brouillon illisible, suppression: {e}")
            self._discard()
            return None

        if raw is None:
            return None

        try:
            record = self._parse_record(raw)
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"⚠️ Brouillon invalide, suppression: {e}")
            self._discard()
            return None

        logger.info(f"✓ Brouillon {self.key} restauré ({record.current_step.value})")
        return record

    def restore_into_store(self) -> bool:
        """Restaure dans le store; les valeurs par défaut restent sinon."""
        record = self.restore()
        if record is None:
            return False
        self.store.replace(record.draft, record.current_step)
        self.last_saved_at = record.saved_at
        return True

    def delete_draft(self) -> None:
        """Supprime l'enregistrement et réinitialise le store (immédiat)."""
        self._task.cancel()
        self._discard()
        self.store.reset_property_data()
        self.last_saved_at = None
        logger.info(f"🗑️ Brouillon {self.key} supprimé")

    def flush(self) -> None:
        """Écrit tout de suite la sauvegarde en attente, s'il y en a une."""
        self._task.flush()

    def close(self) -> None:
        self._task.close()

    def _discard(self) -> None:
        try:
            self.storage.delete(self.key)
        except PersistenceError as e:
            logger.error(f"✗ {e}")

    @staticmethod
    def _parse_record(raw: Dict[str, Any]) -> DraftRecord:
        draft_data = dict(raw.get("draft") or raw.get("propertyData") or {})
        primary_index = draft_data.get("primaryImageIndex", 0) or 0
        images = normalize_images(draft_data.get("images") or [], primary_index)
        draft_data["images"] = images
        draft_data["primaryImageIndex"] = next(
            (i for i, img in enumerate(images) if img.is_primary), 0
        )

        return DraftRecord(
            draft=PropertyDraft.model_validate(draft_data),
            current_step=WizardStep(raw.get("currentStep") or WizardStep.basic_info.value),
            saved_at=raw.get("savedAt") or datetime.now(timezone.utc)
        )
