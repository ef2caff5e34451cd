"""
Opérations catalogue pour les annonces (table Supabase "properties")
"""
from typing import Any, Dict
from supabase import Client
from app.core.config import settings
from app.models import CatalogResponse, PropertyDraft, PropertyStatus
import logging

logger = logging.getLogger(__name__)

# Champs propres à l'assistant, jamais envoyés au catalogue
_WIZARD_ONLY_FIELDS = {"id", "show_exact_address"}


def draft_to_catalog_payload(draft: PropertyDraft, status: PropertyStatus) -> Dict[str, Any]:
    """
    Corps de requête catalogue à partir du brouillon.

    square_feet est stocké dans la colonne area_sqm.
    """
    data = draft.model_dump(mode="json", exclude=_WIZARD_ONLY_FIELDS)
    data["area_sqm"] = data.pop("square_feet") or 0
    data["status"] = PropertyStatus(status).value
    return data


class PropertyCRUD:
    def __init__(self, db: Client):
        self.db = db
        self.table = settings.CATALOG_TABLE

    def create(self, data: Dict[str, Any]) -> CatalogResponse:
        """Créer une nouvelle annonce"""
        try:
            result = self.db.table(self.table).insert(data).execute()

            if result.data:
                logger.info(f"✓ Annonce créée: {result.data[0].get('id')}")
                return CatalogResponse(success=True, data=result.data[0])
            return CatalogResponse(success=False, error="Erreur lors de la création")

        except Exception as e:
            logger.error(f"✗ Erreur création annonce: {e}")
            return CatalogResponse(success=False, error=str(e))

    def update(self, property_id: str, data: Dict[str, Any]) -> CatalogResponse:
        """Mettre à jour une annonce"""
        try:
            if not data:
                return CatalogResponse(success=False, error="Aucune donnée à mettre à jour")

            result = self.db.table(self.table)\
                .update(data)\
                .eq("id", property_id)\
                .execute()

            if result.data:
                logger.info(f"✓ Annonce mise à jour: {property_id}")
                return CatalogResponse(success=True, data=result.data[0])
            return CatalogResponse(success=False, error=f"Annonce {property_id} non trouvée")

        except Exception as e:
            logger.error(f"✗ Erreur mise à jour annonce {property_id}: {e}")
            return CatalogResponse(success=False, error=str(e))


def get_property_crud(db: Client) -> PropertyCRUD:
    return PropertyCRUD(db)
