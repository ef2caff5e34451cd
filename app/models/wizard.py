# app/models/wizard.py

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum

from .property import CamelModel, PropertyDraft


class WizardStep(str, Enum):
    basic_info = "basic-info"
    location = "location"
    pricing = "pricing"
    details = "details"
    features = "features"
    images = "images"
    description = "description"
    ai_summary = "ai-summary"
    review = "review"

class StepStatus(str, Enum):
    current = "current"
    completed = "completed"
    invalid = "invalid"
    upcoming = "upcoming"

class GeocodingState(str, Enum):
    idle = "idle"
    loading = "loading"
    success = "success"
    error = "error"


class GeocodingStatus(BaseModel):
    """Statut transitoire du géocodage (jamais persisté)"""
    state: GeocodingState = GeocodingState.idle
    message: Optional[str] = None

    @classmethod
    def failed(cls, message: str) -> "GeocodingStatus":
        return cls(state=GeocodingState.error, message=message)


class DraftRecord(CamelModel):
    """Enregistrement local du brouillon: {draft, currentStep, savedAt}"""
    draft: PropertyDraft
    current_step: WizardStep = WizardStep.basic_info
    saved_at: datetime


class StepInfo(BaseModel):
    """Étape affichée dans la barre de progression"""
    step: WizardStep
    ordinal: int
    status: StepStatus


class CatalogResponse(BaseModel):
    """Réponse de l'API catalogue"""
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class SubmissionResult(BaseModel):
    """Résultat d'un enregistrement ou d'une publication"""
    success: bool
    status: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    missing_fields: List[str] = Field(default_factory=list)


class SummarySuggestion(BaseModel):
    """Titre et description proposés par l'IA"""
    title: str = ""
    description: str = ""
    error: Optional[str] = None


class GeocodingResult(BaseModel):
    """Coordonnées renvoyées par le fournisseur de géocodage"""
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None


class GeocodingFailure(BaseModel):
    error: str
    details: Optional[str] = None
