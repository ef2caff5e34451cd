# app/models/property.py

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from enum import Enum
import uuid


class PropertyType(str, Enum):
    apartment = "apartment"
    villa = "villa"
    penthouse = "penthouse"
    townhouse = "townhouse"
    office = "office"
    retail = "retail"
    land = "land"

class ListingType(str, Enum):
    sell = "sell"
    rent = "rent"

class PropertyStatus(str, Enum):
    draft = "draft"
    pending = "pending"
    active = "active"


class CamelModel(BaseModel):
    """Attributs en snake_case, JSON en camelCase (format du brouillon)"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ImageMetadata(CamelModel):
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    original_filename: Optional[str] = None
    public_id: Optional[str] = None

class Image(CamelModel):
    """Image hébergée (URL permanente fournie par le widget d'upload)"""
    id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    metadata: Optional[ImageMetadata] = None
    is_primary: bool = False

class CustomFeature(CamelModel):
    id: str
    label: str = Field(..., min_length=1)


def new_image_id() -> str:
    return uuid.uuid4().hex


def normalize_image(raw: Any, is_primary: bool = False) -> Image:
    """
    Convertit une image dans sa forme canonique.

    Accepte une URL brute ou un dict issu des différents chemins d'upload
    (url / secure_url / secureUrl, id / publicId / public_id, ...).

    Raises:
        ValueError: Si aucune URL n'est exploitable
    """
    if isinstance(raw, Image):
        return raw.model_copy(update={"is_primary": is_primary})

    if isinstance(raw, str):
        if not raw.strip():
            raise ValueError("URL d'image vide")
        return Image(id=new_image_id(), url=raw.strip(), is_primary=is_primary)

    if not isinstance(raw, dict):
        raise ValueError(f"Format d'image non supporté: {type(raw).__name__}")

    url = raw.get("url") or raw.get("secure_url") or raw.get("secureUrl")
    if not url:
        raise ValueError("Image sans URL")

    public_id = raw.get("publicId") or raw.get("public_id")
    meta_source = raw.get("metadata") or {}
    metadata = ImageMetadata(
        width=meta_source.get("width", raw.get("width")),
        height=meta_source.get("height", raw.get("height")),
        format=meta_source.get("format", raw.get("format")),
        original_filename=(
            meta_source.get("originalFilename")
            or meta_source.get("original_filename")
            or raw.get("originalFilename")
            or raw.get("original_filename")
            or raw.get("name")
        ),
        public_id=meta_source.get("publicId") or meta_source.get("public_id") or public_id,
    )
    has_metadata = any(v is not None for v in metadata.model_dump().values())

    return Image(
        id=str(raw.get("id") or public_id or new_image_id()),
        url=url,
        metadata=metadata if has_metadata else None,
        is_primary=is_primary,
    )


def normalize_images(raw_images: List[Any], primary_index: int = 0) -> List[Image]:
    """Normalise une liste hétérogène; l'index principal est ramené dans les bornes."""
    if not raw_images:
        return []

    # Respecte un isPrimary explicite s'il est unique, sinon l'index
    flagged = [
        i for i, raw in enumerate(raw_images)
        if isinstance(raw, dict) and (raw.get("isPrimary") or raw.get("is_primary"))
    ]
    if len(flagged) == 1:
        primary_index = flagged[0]
    if not 0 <= primary_index < len(raw_images):
        primary_index = 0

    return [normalize_image(raw, is_primary=(i == primary_index)) for i, raw in enumerate(raw_images)]


class PropertyDraft(CamelModel):
    """Annonce en cours de création"""
    id: Optional[str] = None  # identifiant catalogue une fois créée

    title: str = ""
    description: str = ""
    property_type: Optional[PropertyType] = PropertyType.apartment
    listing_type: Optional[ListingType] = ListingType.sell
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    bedrooms: Optional[int] = Field(0, ge=0)
    bathrooms: Optional[float] = Field(0, ge=0, allow_inf_nan=False)
    square_feet: Optional[int] = Field(0, ge=0)
    year_built: Optional[int] = None

    # Localisation
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""
    approximate_location: str = ""
    show_exact_address: bool = False
    latitude: Optional[float] = Field(None, ge=-90, le=90, allow_inf_nan=False)
    longitude: Optional[float] = Field(None, ge=-180, le=180, allow_inf_nan=False)

    # Contact
    contact_email: str = ""
    phone_country_code: str = ""
    phone_number: str = ""
    is_phone_number_public: bool = True

    features: List[str] = []
    custom_features: List[CustomFeature] = []
    images: List[Image] = []
    primary_image_index: int = Field(0, ge=0)
    status: PropertyStatus = PropertyStatus.draft

    @model_validator(mode="before")
    @classmethod
    def accept_plain_urls(cls, data: Any) -> Any:
        # URL brutes acceptées en entrée; l'index désigne l'image principale
        if not isinstance(data, dict):
            return data
        images = data.get("images")
        if not images or not any(isinstance(img, str) for img in images):
            return data

        index = data.get("primary_image_index", data.get("primaryImageIndex", 0)) or 0
        normalized = normalize_images(images, index)
        data = {k: v for k, v in data.items() if k not in ("primaryImageIndex", "primary_image_index")}
        data["images"] = normalized
        data["primary_image_index"] = next(i for i, img in enumerate(normalized) if img.is_primary)
        return data

    @field_validator("bathrooms")
    @classmethod
    def bathrooms_half_steps(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and (v * 2) != int(v * 2):
            raise ValueError("Le nombre de salles de bain doit être un multiple de 0.5")
        return v

    @field_validator("features")
    @classmethod
    def unique_features(cls, v: List[str]) -> List[str]:
        # Sémantique d'ensemble, ordre d'insertion conservé
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_invariants(self) -> "PropertyDraft":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude et longitude doivent être renseignées ensemble")

        primaries = [i for i, img in enumerate(self.images) if img.is_primary]
        if self.images:
            if len(primaries) != 1:
                raise ValueError("Une seule image principale est requise")
            if primaries[0] != self.primary_image_index:
                raise ValueError("primaryImageIndex ne correspond pas à l'image principale")
        elif self.primary_image_index != 0:
            raise ValueError("primaryImageIndex doit valoir 0 sans image")
        return self


# Champs du brouillon, nom d'attribut et alias JSON
DRAFT_FIELDS = set(PropertyDraft.model_fields)
DRAFT_ALIASES: Dict[str, str] = {to_camel(name): name for name in PropertyDraft.model_fields}
