# app/models/__init__.py
"""
Modèles Pydantic de l'assistant de création d'annonces

Modules:
- Property : Brouillon d'annonce, images, caractéristiques
- Wizard : Étapes, statuts, enregistrement local, résultats de soumission
"""

# ====================================
# PROPERTY MODELS
# ====================================
from .property import (
    PropertyType,
    ListingType,
    PropertyStatus,
    ImageMetadata,
    Image,
    CustomFeature,
    PropertyDraft,
    DRAFT_FIELDS,
    DRAFT_ALIASES,
    new_image_id,
    normalize_image,
    normalize_images
)

# ====================================
# WIZARD MODELS
# ====================================
from .wizard import (
    WizardStep,
    StepStatus,
    GeocodingState,
    GeocodingStatus,
    GeocodingResult,
    GeocodingFailure,
    DraftRecord,
    StepInfo,
    CatalogResponse,
    SubmissionResult,
    SummarySuggestion
)

# ====================================
# EXPORTS
# ====================================
__all__ = [
    # Property
    "PropertyType",
    "ListingType",
    "PropertyStatus",
    "ImageMetadata",
    "Image",
    "CustomFeature",
    "PropertyDraft",
    "DRAFT_FIELDS",
    "DRAFT_ALIASES",
    "new_image_id",
    "normalize_image",
    "normalize_images",

    # Wizard
    "WizardStep",
    "StepStatus",
    "GeocodingState",
    "GeocodingStatus",
    "GeocodingResult",
    "GeocodingFailure",
    "DraftRecord",
    "StepInfo",
    "CatalogResponse",
    "SubmissionResult",
    "SummarySuggestion",
]
