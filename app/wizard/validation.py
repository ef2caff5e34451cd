"""
Validation des étapes de l'assistant.
Prédicats purs sur le brouillon: même brouillon, même réponse.
"""
from typing import List
import re

from app.models import PropertyDraft, WizardStep

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Libellés affichés dans la liste des champs manquants
LABELS = {
    "title": "Title",
    "description": "Description",
    "property_type": "Property Type",
    "listing_type": "Listing Type",
    "price": "Price",
    "bedrooms": "Bedrooms",
    "bathrooms": "Bathrooms",
    "square_feet": "Square Feet",
    "contact_email": "Contact Email",
    "phone_number": "Phone Number",
    "city": "City",
    "address": "Address",
    "approximate_location": "Approximate Location",
    "images": "Images",
}

# Ordre du contrôle global avant publication
REQUIRED_FOR_PUBLISH = [
    "title",
    "description",
    "property_type",
    "bedrooms",
    "bathrooms",
    "square_feet",
]


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return value == 0


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email.strip()) is not None


def _missing_basic_fields(draft: PropertyDraft) -> List[str]:
    missing = []
    if _is_blank(draft.title):
        missing.append(LABELS["title"])
    if not is_valid_email(draft.contact_email):
        missing.append(LABELS["contact_email"])
    if _is_blank(draft.phone_number):
        missing.append(LABELS["phone_number"])
    return missing


def _missing_location_fields(draft: PropertyDraft) -> List[str]:
    missing = []
    if _is_blank(draft.city):
        missing.append(LABELS["city"])
    if draft.show_exact_address:
        if _is_blank(draft.address):
            missing.append(LABELS["address"])
    elif _is_blank(draft.approximate_location):
        missing.append(LABELS["approximate_location"])
    return missing


def _missing_pricing_fields(draft: PropertyDraft) -> List[str]:
    missing = []
    if draft.property_type is None:
        missing.append(LABELS["property_type"])
    if draft.listing_type is None:
        missing.append(LABELS["listing_type"])
    if draft.price is None or draft.price <= 0:
        missing.append(LABELS["price"])
    return missing


def _missing_details_fields(draft: PropertyDraft) -> List[str]:
    missing = []
    if draft.bedrooms is None:
        missing.append(LABELS["bedrooms"])
    if draft.bathrooms is None:
        missing.append(LABELS["bathrooms"])
    if draft.square_feet is None or draft.square_feet <= 0:
        missing.append(LABELS["square_feet"])
    return missing


def get_missing_fields(draft: PropertyDraft) -> List[str]:
    """
    Contrôle global avant publication.

    Parcourt titre, description, type, chambres, salles de bain, surface,
    puis le contact et les images. Toute valeur vide, nulle ou absente est
    signalée.

    Args:
        draft: Brouillon à contrôler

    Returns:
        Libellés des champs manquants, dans l'ordre ci-dessus
    """
    missing = [LABELS[field] for field in REQUIRED_FOR_PUBLISH if _is_blank(getattr(draft, field))]

    if not is_valid_email(draft.contact_email):
        missing.append(LABELS["contact_email"])
    if _is_blank(draft.phone_number):
        missing.append(LABELS["phone_number"])
    if not draft.images:
        missing.append(LABELS["images"])

    return missing


def get_step_missing_fields(step: WizardStep, draft: PropertyDraft) -> List[str]:
    """Libellés manquants pour une étape donnée."""
    step = WizardStep(step)

    # basic-info/location et pricing/details: deux unités, une seule étape visuelle
    if step in (WizardStep.basic_info, WizardStep.location):
        return _missing_basic_fields(draft) + _missing_location_fields(draft)
    if step in (WizardStep.pricing, WizardStep.details):
        return _missing_pricing_fields(draft) + _missing_details_fields(draft)
    if step == WizardStep.images:
        return [] if draft.images else [LABELS["images"]]
    if step == WizardStep.description:
        return [LABELS["description"]] if _is_blank(draft.description) else []
    if step == WizardStep.review:
        return get_missing_fields(draft)

    # features, ai-summary: étapes optionnelles
    return []


def is_step_valid(step: WizardStep, draft: PropertyDraft) -> bool:
    """
    Vérifie si une étape est complète.

    Args:
        step: Étape à vérifier
        draft: Brouillon courant

    Returns:
        True si tous les champs requis de l'étape sont renseignés
    """
    return not get_step_missing_fields(step, draft)
