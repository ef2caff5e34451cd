"""
Navigation entre les étapes de l'assistant.
Machine à états gardée par la validation.
"""
from typing import Dict, List
import logging

from app.models import StepInfo, StepStatus, WizardStep
from app.wizard.errors import StepIncompleteError
from app.wizard.state import DraftStore
from app.wizard.validation import get_step_missing_fields, is_step_valid

logger = logging.getLogger(__name__)

# Étapes visuelles, dans l'ordre
STEP_ORDER: List[WizardStep] = [
    WizardStep.basic_info,
    WizardStep.pricing,
    WizardStep.features,
    WizardStep.images,
    WizardStep.description,
    WizardStep.ai_summary,
    WizardStep.review,
]

# location et details partagent la position de leur étape combinée
_COMBINED: Dict[WizardStep, WizardStep] = {
    WizardStep.location: WizardStep.basic_info,
    WizardStep.details: WizardStep.pricing,
}


def step_index(step: WizardStep) -> int:
    """Position (0-based) de l'étape dans l'ordre visuel."""
    step = WizardStep(step)
    return STEP_ORDER.index(_COMBINED.get(step, step))


def display_ordinal(step: WizardStep) -> int:
    """Numéro affiché (1-based) dans la barre de progression."""
    return step_index(step) + 1


def can_transition(from_step: WizardStep, to_step: WizardStep, draft) -> bool:
    """
    Indique si l'on peut passer de from_step à to_step.

    Retour en arrière (ou même position) toujours permis; avancer d'une
    seule position seulement si l'étape de départ est valide.
    """
    current = step_index(from_step)
    target = step_index(to_step)

    if target <= current:
        return True
    return target == current + 1 and is_step_valid(from_step, draft)


class StepNavigator:
    """Navigation dans l'ordre fixe des étapes."""

    def __init__(self, store: DraftStore):
        self.store = store

    @property
    def current_step(self) -> WizardStep:
        return self.store.current_step

    def go_to_next_step(self) -> WizardStep:
        """
        Avance d'une étape si l'étape courante est complète.

        Returns:
            Nouvelle étape courante

        Raises:
            StepIncompleteError: Si des champs requis manquent
        """
        current = self.store.current_step
        index = step_index(current)
        if index == len(STEP_ORDER) - 1:
            return current

        missing = get_step_missing_fields(current, self.store.property_data)
        if missing:
            logger.info(f"Navigation bloquée sur {current.value}: {missing}")
            raise StepIncompleteError(current.value, missing)

        self.store.set_current_step(STEP_ORDER[index + 1])
        return self.store.current_step

    def go_to_previous_step(self) -> WizardStep:
        """Recule d'une étape (sans validation). Sans effet sur la première."""
        index = step_index(self.store.current_step)
        if index > 0:
            self.store.set_current_step(STEP_ORDER[index - 1])
        elif self.store.current_step != STEP_ORDER[0]:
            self.store.set_current_step(STEP_ORDER[0])
        return self.store.current_step

    def set_current_step(self, step: WizardStep) -> bool:
        """
        Saut direct vers une étape.

        Returns:
            True si le saut a eu lieu, False s'il est refusé (sans erreur)
        """
        step = WizardStep(step)
        if not can_transition(self.store.current_step, step, self.store.property_data):
            logger.debug(f"Saut refusé: {self.store.current_step.value} -> {step.value}")
            return False
        self.store.set_current_step(step)
        return True

    def get_step_status(self, step: WizardStep) -> StepStatus:
        index = step_index(step)
        current = step_index(self.store.current_step)

        if index == current:
            return StepStatus.current
        if index < current:
            valid = is_step_valid(step, self.store.property_data)
            return StepStatus.completed if valid else StepStatus.invalid
        return StepStatus.upcoming

    def get_steps(self) -> List[StepInfo]:
        """Étapes visuelles avec leur numéro et leur statut."""
        return [
            StepInfo(step=step, ordinal=display_ordinal(step), status=self.get_step_status(step))
            for step in STEP_ORDER
        ]
