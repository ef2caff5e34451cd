"""Listing Wizard - Application principale"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.api.v1.api import api_router
from app.api.v1.endpoints.wizard import get_session_manager
import logging

logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="API de l'assistant de création d'annonces immobilières",
    version=settings.VERSION,
    debug=settings.DEBUG
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def startup_event():
    try:
        get_session_manager()
        logger.info("✓ Catalogue Supabase connecté")
    except Exception as e:
        logger.error(f"✗ Erreur Supabase: {e}")

@app.on_event("shutdown")
async def shutdown_event():
    try:
        manager = get_session_manager()
    except Exception as e:
        logger.error(f"✗ Gestionnaire de sessions indisponible: {e}")
        return
    # Les sauvegardes en attente sont écrites avant l'arrêt
    manager.close_all()

@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "running"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# Routes API
app.include_router(api_router, prefix="/api/v1")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
