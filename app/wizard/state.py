"""
État de l'assistant de création d'annonces.
Source unique de vérité pour le brouillon et l'étape courante.
"""
from typing import Any, Callable, Dict, List, Mapping, Optional, Set
import logging

from app.models import DRAFT_ALIASES, DRAFT_FIELDS, PropertyDraft, WizardStep
from app.wizard.errors import UnknownFieldError

logger = logging.getLogger(__name__)

# Nom réservé dans les notifications pour un changement d'étape
STEP_FIELD = "current_step"

Listener = Callable[[Set[str]], None]


def create_initial_draft() -> PropertyDraft:
    """
    Crée le brouillon vide par défaut.

    Returns:
        Brouillon avec valeurs par défaut
    """
    return PropertyDraft()


class DraftStore:
    """
    Détient le brouillon et l'étape courante.

    Toute modification passe par update_property_data(); chaque mutation
    réussie notifie les abonnés de façon synchrone, dans l'ordre
    d'abonnement, avec l'ensemble des champs modifiés.
    """

    def __init__(
        self,
        initial_data: Optional[PropertyDraft] = None,
        initial_step: WizardStep = WizardStep.basic_info
    ):
        self._draft = initial_data or create_initial_draft()
        self._current_step = initial_step
        self._listeners: List[Listener] = []

    @property
    def property_data(self) -> PropertyDraft:
        return self._draft

    @property
    def current_step(self) -> WizardStep:
        return self._current_step

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Abonne un observateur aux mutations.

        Returns:
            Fonction de désabonnement
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update_property_data(self, partial: Mapping[str, Any]) -> PropertyDraft:
        """
        Fusion superficielle d'un sous-ensemble de champs.

        Les listes et objets imbriqués sont remplacés en bloc. Les clés
        peuvent être des noms d'attributs ou des alias camelCase.

        Args:
            partial: Champs à mettre à jour

        Returns:
            Brouillon mis à jour

        Raises:
            UnknownFieldError: Si une clé ne correspond à aucun champ
            pydantic.ValidationError: Si le résultat viole le modèle
        """
        updates: Dict[str, Any] = {}
        unknown = []
        for key, value in partial.items():
            name = key if key in DRAFT_FIELDS else DRAFT_ALIASES.get(key)
            if name is None:
                unknown.append(key)
            else:
                updates[name] = value

        if unknown:
            raise UnknownFieldError(unknown)
        if not updates:
            return self._draft

        merged = {**self._draft.model_dump(), **updates}
        self._draft = PropertyDraft.model_validate(merged)

        logger.debug(f"Brouillon mis à jour: {sorted(updates)}")
        self._notify(set(updates))
        return self._draft

    def set_current_step(self, step: WizardStep) -> None:
        """Change l'étape courante sans contrôle (voir StepNavigator)."""
        step = WizardStep(step)
        if step == self._current_step:
            return
        self._current_step = step
        logger.debug(f"Étape courante: {step.value}")
        self._notify({STEP_FIELD})

    def replace(self, draft: PropertyDraft, step: WizardStep) -> None:
        """Remplace tout l'état (restauration). Ne notifie pas."""
        self._draft = draft
        self._current_step = WizardStep(step)

    def reset_property_data(self) -> None:
        """Restaure le brouillon vide et la première étape."""
        self._draft = create_initial_draft()
        self._current_step = WizardStep.basic_info
        logger.info("Brouillon réinitialisé")

    def _notify(self, changed: Set[str]) -> None:
        # La mutation est déjà appliquée: un observateur en échec ne doit
        # ni l'interrompre ni priver les suivants de la notification
        for listener in list(self._listeners):
            try:
                listener(changed)
            except Exception as e:
                logger.error(f"✗ Observateur {getattr(listener, '__qualname__', listener)} en échec: {e}")
