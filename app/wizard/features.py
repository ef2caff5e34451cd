"""
Caractéristiques du bien: équipements standards et personnalisés.
"""
from typing import List, Optional
import logging
import uuid

from app.core.config import settings
from app.models import CustomFeature
from app.wizard.errors import FeatureError
from app.wizard.state import DraftStore

logger = logging.getLogger(__name__)

STANDARD_FEATURES = [
    "airConditioning",
    "heating",
    "balconyPatio",
    "furnished",
    "garage",
    "gym",
    "pool",
    "garden",
    "petFriendly",
    "oceanView",
    "fireplace",
    "elevator",
    "wheelchairAccess",
    "securitySystem",
    "concierge",
    "laundryRoom",
]


class FeatureManager:
    def __init__(self, store: DraftStore, max_custom: Optional[int] = None):
        self.store = store
        self.max_custom = max_custom or settings.MAX_CUSTOM_FEATURES

    def toggle_feature(self, feature_id: str, enabled: bool) -> List[str]:
        """Coche ou décoche un équipement standard."""
        if feature_id not in STANDARD_FEATURES:
            raise FeatureError(f"Équipement inconnu: {feature_id}")

        features = [f for f in self.store.property_data.features if f != feature_id]
        if enabled:
            features.append(feature_id)
        self.store.update_property_data({"features": features})
        return features

    def add_custom_feature(self, label: str) -> CustomFeature:
        """
        Ajoute une caractéristique libre.

        Raises:
            FeatureError: Libellé vide, doublon ou limite atteinte
        """
        label = (label or "").strip()
        existing = self.store.property_data.custom_features

        if not label:
            raise FeatureError("Le libellé ne peut pas être vide")
        if len(existing) >= self.max_custom:
            raise FeatureError(f"Maximum {self.max_custom} caractéristiques personnalisées")
        if any(f.label.lower() == label.lower() for f in existing):
            raise FeatureError(f"Caractéristique déjà présente: {label}")

        feature = CustomFeature(id=uuid.uuid4().hex, label=label)
        self.store.update_property_data({"custom_features": existing + [feature]})
        logger.info(f"✓ Caractéristique ajoutée: {label}")
        return feature

    def remove_custom_feature(self, feature_id: str) -> bool:
        existing = self.store.property_data.custom_features
        remaining = [f for f in existing if f.id != feature_id]
        if len(remaining) == len(existing):
            return False
        self.store.update_property_data({"custom_features": remaining})
        return True
