"""Router API principal v1"""
from fastapi import APIRouter
from app.api.v1.endpoints import wizard

# Créer le router principal
api_router = APIRouter()

# ==================== WIZARD ====================
api_router.include_router(
    wizard.router,
    prefix="/wizard",
    tags=["Listing Wizard"]
)
