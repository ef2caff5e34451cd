"""
Collection d'images du brouillon avec une seule image principale.
"""
from typing import Any, Dict, List, Optional, Union
import logging

from app.core.config import settings
from app.models import Image, ImageMetadata, new_image_id
from app.wizard.errors import ImageLimitError
from app.wizard.state import DraftStore

logger = logging.getLogger(__name__)


class ImageCollectionManager:
    """
    Maintient images, primary_image_index et is_primary cohérents.

    Ne lance jamais d'upload et ne stocke aucun binaire: seulement les URL
    hébergées et leurs métadonnées. Chaque modification passe par
    update_property_data().
    """

    def __init__(self, store: DraftStore, max_images: Optional[int] = None):
        self.store = store
        self.max_images = max_images or settings.MAX_IMAGES

    @property
    def images(self) -> List[Image]:
        return list(self.store.property_data.images)

    @property
    def primary_image(self) -> Optional[Image]:
        return next((img for img in self.images if img.is_primary), None)

    @property
    def remaining_slots(self) -> int:
        return max(self.max_images - len(self.images), 0)

    @property
    def limit_reached(self) -> bool:
        return self.remaining_slots == 0

    def add_image(
        self,
        url: str,
        metadata: Optional[Union[ImageMetadata, Dict[str, Any]]] = None
    ) -> Image:
        """
        Ajoute une image hébergée en fin de collection.

        La première image ajoutée à une collection vide devient principale.

        Raises:
            ImageLimitError: Si la collection est pleine
        """
        images = self.images
        if len(images) >= self.max_images:
            logger.warning(f"⚠️ Limite de {self.max_images} images atteinte")
            raise ImageLimitError(self.max_images)

        if isinstance(metadata, dict):
            metadata = ImageMetadata.model_validate(metadata) if metadata else None

        image = Image(
            id=new_image_id(),
            url=url,
            metadata=metadata,
            is_primary=not images
        )
        self._commit(images + [image])
        logger.info(f"✓ Image ajoutée ({len(images) + 1}/{self.max_images})")
        return image

    def remove_image(self, image_id: str) -> bool:
        """
        Supprime une image; la nouvelle première image devient principale
        si l'image principale a été retirée.

        Returns:
            False si l'identifiant est inconnu
        """
        images = self.images
        removed = next((img for img in images if img.id == image_id), None)
        if removed is None:
            return False

        remaining = [img for img in images if img.id != image_id]
        if removed.is_primary and remaining:
            remaining[0] = remaining[0].model_copy(update={"is_primary": True})

        self._commit(remaining)
        logger.info(f"✓ Image supprimée: {image_id}")
        return True

    def set_primary(self, image_id: str) -> bool:
        """Désigne l'image principale; sans effet si l'identifiant est inconnu."""
        images = self.images
        if not any(img.id == image_id for img in images):
            return False

        self._commit([
            img.model_copy(update={"is_primary": img.id == image_id})
            for img in images
        ])
        return True

    def _commit(self, images: List[Image]) -> None:
        primary_index = next((i for i, img in enumerate(images) if img.is_primary), 0)
        self.store.update_property_data({
            "images": images,
            "primary_image_index": primary_index
        })
