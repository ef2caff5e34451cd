"""
Routes API pour l'assistant de création d'annonces
"""
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError
from typing import Any, Dict, List, Optional
import logging

from app.crud import get_property_crud
from app.db import get_supabase
from app.models import StepInfo, SubmissionResult, SummarySuggestion, WizardStep
from app.services.geocoding import HttpGeocodingProvider
from app.wizard import WizardSession, WizardSessionManager
from app.wizard.errors import FeatureError, StepIncompleteError, UnknownFieldError
from app.wizard.persistence import LocalDraftStorage

router = APIRouter()
logger = logging.getLogger(__name__)

# ✅ Ne PAS instancier ici, utiliser une factory
_manager_instance: Optional[WizardSessionManager] = None


def get_session_manager() -> WizardSessionManager:
    """Factory pour obtenir le gestionnaire de sessions (lazy loading)"""
    global _manager_instance
    if _manager_instance is None:
        logger.info("🧭 Initialisation du gestionnaire de sessions...")
        _manager_instance = WizardSessionManager(
            storage=LocalDraftStorage(),
            geocoder=HttpGeocodingProvider(),
            catalog=get_property_crud(get_supabase())
        )
    return _manager_instance


# ==================== SCHÉMAS ====================

class SessionOpenRequest(BaseModel):
    user_key: str = Field("anonymous", min_length=1)

class StepRequest(BaseModel):
    step: WizardStep

class ExactAddressRequest(BaseModel):
    enabled: bool

class CoordinatesRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

class UploadSuccessRequest(BaseModel):
    """Callback de succès du widget d'upload"""
    secure_url: str
    metadata: Optional[Dict[str, Any]] = None

class UploadErrorRequest(BaseModel):
    error: Any

class FeatureToggleRequest(BaseModel):
    enabled: bool

class CustomFeatureRequest(BaseModel):
    label: str

class SummaryRequest(BaseModel):
    apply: bool = False

class NavigationResponse(BaseModel):
    moved: bool
    current_step: WizardStep


def _get_session(user_key: str, manager: WizardSessionManager) -> WizardSession:
    session = manager.get(user_key)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {user_key} non trouvée"
        )
    return session


# ==================== SESSION ====================

@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def open_session(
    request: SessionOpenRequest,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Ouvrir (ou restaurer) la session d'un utilisateur"""
    session = manager.open(request.user_key)
    return session.snapshot()


@router.get("/sessions/{user_key}")
async def get_session_state(
    user_key: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """État complet de la session"""
    return _get_session(user_key, manager).snapshot()


@router.patch("/sessions/{user_key}/data")
async def update_property_data(
    user_key: str,
    data: Dict[str, Any],
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Mettre à jour une partie du brouillon"""
    session = _get_session(user_key, manager)
    try:
        session.update_property_data(data)
    except UnknownFieldError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ValidationError as e:
        logger.error(f"Erreur de validation du brouillon {user_key}: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False, include_input=False)
        )
    return session.snapshot()


@router.post("/sessions/{user_key}/close", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    user_key: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Quitter l'assistant en conservant le brouillon local"""
    _get_session(user_key, manager)
    manager.drop(user_key, flush=True)
    return None


@router.delete("/sessions/{user_key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_draft(
    user_key: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Supprimer le brouillon et terminer la session"""
    session = _get_session(user_key, manager)
    session.delete_draft()
    manager.drop(user_key)
    logger.info(f"Brouillon {user_key} supprimé")
    return None


# ==================== NAVIGATION ====================

@router.get("/sessions/{user_key}/steps", response_model=List[StepInfo])
async def list_steps(
    user_key: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Étapes et leur statut"""
    return _get_session(user_key, manager).navigator.get_steps()


@router.post("/sessions/{user_key}/steps/next", response_model=NavigationResponse)
async def go_to_next_step(
    user_key: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Étape suivante (si l'étape courante est complète)"""
    session = _get_session(user_key, manager)
    previous = session.current_step
    try:
        current = session.navigator.go_to_next_step()
    except StepIncompleteError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"step": e.step, "missing_fields": e.missing_fields}
        )
    return NavigationResponse(moved=current != previous, current_step=current)


@router.post("/sessions/{user_key}/steps/previous", response_model=NavigationResponse)
async def go_to_previous_step(
    user_key: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Étape précédente"""
    session = _get_session(user_key, manager)
    previous = session.current_step
    current = session.navigator.go_to_previous_step()
    return NavigationResponse(moved=current != previous, current_step=current)


@router.put("/sessions/{user_key}/steps/current", response_model=NavigationResponse)
async def set_current_step(
    user_key: str,
    request: StepRequest,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Saut direct vers une étape (refusé sans erreur si elle est à venir)"""
    session = _get_session(user_key, manager)
    moved = session.navigator.set_current_step(request.step)
    return NavigationResponse(moved=moved, current_step=session.current_step)


# ==================== LOCALISATION ====================

@router.put("/sessions/{user_key}/location/exact-address")
async def set_exact_address_mode(
    user_key: str,
    request: ExactAddressRequest,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Activer/désactiver l'adresse exacte"""
    session = _get_session(user_key, manager)
    session.set_exact_address_mode(request.enabled)
    return session.snapshot()


@router.put("/sessions/{user_key}/location/coordinates")
async def set_coordinates(
    user_key: str,
    request: CoordinatesRequest,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Fixer les coordonnées manuellement (carte)"""
    session = _get_session(user_key, manager)
    session.set_coordinates(request.latitude, request.longitude)
    return session.snapshot()


# ==================== IMAGES ====================

@router.post("/sessions/{user_key}/uploads/open")
async def open_upload_widget(
    user_key: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Options du widget d'upload"""
    return _get_session(user_key, manager).uploads.open()


@router.post("/sessions/{user_key}/uploads/success")
async def upload_success(
    user_key: str,
    request: UploadSuccessRequest,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Callback de succès du widget"""
    session = _get_session(user_key, manager)
    image = session.uploads.on_success(request.secure_url, request.metadata)
    if image is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(session.uploads.last_error)
        )
    return session.snapshot()


@router.post("/sessions/{user_key}/uploads/error")
async def upload_error(
    user_key: str,
    request: UploadErrorRequest,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Callback d'erreur du widget"""
    session = _get_session(user_key, manager)
    session.uploads.on_error(request.error)
    return session.snapshot()


@router.delete("/sessions/{user_key}/images/{image_id}")
async def remove_image(
    user_key: str,
    image_id: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Retirer une image"""
    session = _get_session(user_key, manager)
    if not session.images.remove_image(image_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Image {image_id} non trouvée")
    return session.snapshot()


@router.put("/sessions/{user_key}/images/{image_id}/primary")
async def set_primary_image(
    user_key: str,
    image_id: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Désigner l'image principale"""
    session = _get_session(user_key, manager)
    if not session.images.set_primary(image_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Image {image_id} non trouvée")
    return session.snapshot()


# ==================== CARACTÉRISTIQUES ====================

@router.put("/sessions/{user_key}/features/{feature_id}")
async def toggle_feature(
    user_key: str,
    feature_id: str,
    request: FeatureToggleRequest,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    session = _get_session(user_key, manager)
    try:
        session.features.toggle_feature(feature_id, request.enabled)
    except FeatureError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return session.snapshot()


@router.post("/sessions/{user_key}/custom-features", status_code=status.HTTP_201_CREATED)
async def add_custom_feature(
    user_key: str,
    request: CustomFeatureRequest,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    session = _get_session(user_key, manager)
    try:
        session.features.add_custom_feature(request.label)
    except FeatureError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return session.snapshot()


@router.delete("/sessions/{user_key}/custom-features/{feature_id}")
async def remove_custom_feature(
    user_key: str,
    feature_id: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    session = _get_session(user_key, manager)
    if not session.features.remove_custom_feature(feature_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Caractéristique {feature_id} non trouvée")
    return session.snapshot()


# ==================== IA ====================

@router.post("/sessions/{user_key}/ai-summary", response_model=SummarySuggestion)
async def generate_summary(
    user_key: str,
    request: SummaryRequest,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Suggestion de titre et de description"""
    session = _get_session(user_key, manager)
    return await session.generate_summary(apply=request.apply)


# ==================== SOUMISSION ====================

@router.post("/sessions/{user_key}/save-draft", response_model=SubmissionResult)
async def save_draft(
    user_key: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Enregistrer le brouillon dans le catalogue"""
    session = _get_session(user_key, manager)
    return await session.submission.save_draft()


@router.post("/sessions/{user_key}/publish", response_model=SubmissionResult)
async def publish_property(
    user_key: str,
    manager: WizardSessionManager = Depends(get_session_manager)
):
    """Publier l'annonce; la session se termine en cas de succès"""
    session = _get_session(user_key, manager)
    result = await session.submission.publish_property()
    if result.success:
        manager.drop(user_key)
    return result
