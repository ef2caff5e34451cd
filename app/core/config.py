"""Configuration de l'assistant de création d'annonces"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Paramètres de configuration"""

    # Application
    APP_NAME: str = "Listing Wizard"
    VERSION: str = "1.0.0"
    DEBUG: bool = True

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS - URLs autorisées
    CORS_ORIGINS: str = "http://localhost:8000,http://localhost:3000,http://127.0.0.1:3000"

    # Supabase (catalogue des annonces)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    CATALOG_TABLE: str = "properties"

    # Hugging Face API (suggestions de titre/description)
    HUGGINGFACE_API_TOKEN: str = ""
    LLM_MODEL: str = "mistralai/Mistral-7B-Instruct-v0.2"
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 512

    # Géocodage
    GEOCODING_API_URL: str = "http://localhost:8090/api/properties/geocode"
    GEOCODING_TIMEOUT: float = 10.0
    GEOCODING_DELAY: float = 1.5  # secondes d'inactivité avant l'appel

    # Brouillon local
    AUTOSAVE_DELAY: float = 1.5
    DRAFT_STORAGE_DIR: str = ".drafts"
    DRAFT_KEY_PREFIX: str = "property_wizard_draft"

    # Images & caractéristiques
    MAX_IMAGES: int = 10
    MAX_CUSTOM_FEATURES: int = 5
    UPLOAD_ALLOWED_FORMATS: str = "jpg,jpeg,png,webp"
    UPLOAD_FOLDER: str = "properties"

    @property
    def cors_origins_list(self) -> List[str]:
        """Transforme CORS_ORIGINS en liste"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def upload_formats_list(self) -> List[str]:
        """Transforme UPLOAD_ALLOWED_FORMATS en liste"""
        return [fmt.strip().lower() for fmt in self.UPLOAD_ALLOWED_FORMATS.split(",") if fmt.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Instance globale
settings = Settings()
