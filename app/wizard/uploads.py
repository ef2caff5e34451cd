"""
Protocole du widget d'upload externe.
Le widget effectue le transfert; on ne fait que réagir à ses callbacks.
"""
from typing import Any, Dict, Optional
import logging

from app.core.config import settings
from app.models import Image, ImageMetadata
from app.wizard.errors import UploadError
from app.wizard.images import ImageCollectionManager

logger = logging.getLogger(__name__)


def normalize_upload_metadata(info: Optional[Dict[str, Any]]) -> Optional[ImageMetadata]:
    """Métadonnées du widget (camelCase ou snake_case) -> ImageMetadata."""
    if not info:
        return None

    metadata = ImageMetadata(
        width=info.get("width"),
        height=info.get("height"),
        format=info.get("format"),
        original_filename=info.get("originalFilename") or info.get("original_filename"),
        public_id=info.get("publicId") or info.get("public_id"),
    )
    if all(value is None for value in metadata.model_dump().values()):
        return None
    return metadata


class UploadWidgetBridge:
    """
    Relie le widget d'upload à la collection d'images.

    on_success() ajoute l'image; on_error() (et la limite atteinte)
    enregistrent une UploadError consultable via last_error, sans toucher
    à la collection.
    """

    def __init__(self, images: ImageCollectionManager):
        self.images = images
        self.last_error: Optional[UploadError] = None
        self.is_open = False

    def open(self) -> Dict[str, Any]:
        """
        Ouvre le widget.

        Returns:
            Options transmises au widget (fichiers restants, formats, dossier)
        """
        self.last_error = None
        self.is_open = True
        return {
            "maxFiles": self.images.remaining_slots,
            "clientAllowedFormats": settings.upload_formats_list,
            "folder": settings.UPLOAD_FOLDER,
            "multiple": self.images.remaining_slots > 1,
        }

    def close(self) -> None:
        self.is_open = False

    def on_success(self, secure_url: str, metadata: Optional[Dict[str, Any]] = None) -> Optional[Image]:
        """
        Callback de succès: URL permanente + métadonnées.

        Returns:
            Image ajoutée, ou None si elle a été refusée
        """
        if not secure_url:
            self.on_error("Upload returned no URL")
            return None

        try:
            image = self.images.add_image(secure_url, normalize_upload_metadata(metadata))
        except UploadError as e:
            self.last_error = e
            logger.warning(f"⚠️ Image refusée: {e}")
            return None

        self.last_error = None
        return image

    def on_error(self, error: Any) -> UploadError:
        """Callback d'erreur du widget."""
        if isinstance(error, UploadError):
            upload_error = error
        elif isinstance(error, dict):
            upload_error = UploadError(
                str(error.get("message") or error.get("statusText") or "Upload failed"),
                details=str(error.get("status")) if error.get("status") is not None else None
            )
        else:
            upload_error = UploadError(str(error) or "Upload failed")

        self.last_error = upload_error
        logger.error(f"❌ Erreur d'upload: {upload_error}")
        return upload_error
