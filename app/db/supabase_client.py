"""
Client Supabase pour l'application.
Gère la connexion au catalogue des annonces.
"""
from supabase import create_client, Client
from functools import lru_cache
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    """
    Classe wrapper pour le client Supabase.
    Permet une gestion plus flexible de la connexion.
    """

    _instance: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Retourne l'instance du client Supabase (Singleton).

        Returns:
            Client Supabase configuré

        Raises:
            ValueError: Si SUPABASE_URL / SUPABASE_KEY sont absents
        """
        if cls._instance is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
                raise ValueError("❌ SUPABASE_URL / SUPABASE_KEY manquantes dans .env")
            try:
                logger.info("🔌 Initialisation du client Supabase...")

                cls._instance = create_client(
                    supabase_url=settings.SUPABASE_URL,
                    supabase_key=settings.SUPABASE_KEY
                )

                logger.info("✅ Client Supabase initialisé avec succès")

            except Exception as e:
                logger.error(f"❌ Erreur lors de l'initialisation Supabase: {str(e)}")
                raise

        return cls._instance


@lru_cache()
def get_supabase() -> Client:
    """
    Retourne une instance du client Supabase.

    Utilise @lru_cache pour créer une seule instance réutilisée.

    Returns:
        Client Supabase configuré
    """
    return SupabaseClient.get_client()


__all__ = [
    "SupabaseClient",
    "get_supabase",
]
