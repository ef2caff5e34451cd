# tests/test_models.py
"""
Tests des modèles Pydantic
Exécuter: pytest tests/test_models.py -v
"""
import pytest
from pydantic import ValidationError

from app.models import (
    Image, PropertyDraft, PropertyStatus, PropertyType, ListingType,
    WizardStep, normalize_image, normalize_images
)
from app.wizard.state import DraftStore


def test_draft_defaults():
    """Test brouillon vide par défaut"""
    draft = PropertyDraft()
    assert draft.title == ""
    assert draft.property_type == PropertyType.apartment
    assert draft.listing_type == ListingType.sell
    assert draft.status == PropertyStatus.draft
    assert draft.images == []
    assert draft.primary_image_index == 0
    assert draft.latitude is None and draft.longitude is None
    assert draft.is_phone_number_public is True


def test_draft_accepts_camel_case_and_dumps_aliases():
    """Test alias camelCase en entrée et en sortie"""
    draft = PropertyDraft.model_validate({"zipCode": "28013", "squareFeet": 900, "contactEmail": "a@b.co"})
    assert draft.zip_code == "28013"
    assert draft.square_feet == 900

    dumped = draft.model_dump(by_alias=True)
    assert dumped["zipCode"] == "28013"
    assert dumped["primaryImageIndex"] == 0
    assert "isPhoneNumberPublic" in dumped


def test_latitude_without_longitude_rejected():
    """Test coordonnées: les deux ou aucune"""
    with pytest.raises(ValidationError):
        PropertyDraft(latitude=40.0)


def test_coordinates_out_of_range_rejected():
    with pytest.raises(ValidationError):
        PropertyDraft(latitude=95.0, longitude=10.0)
    with pytest.raises(ValidationError):
        PropertyDraft(latitude=10.0, longitude=-181.0)


def test_negative_price_rejected():
    """Test prix négatif (doit échouer)"""
    with pytest.raises(ValidationError):
        PropertyDraft(price=-1000.0)


def test_bathrooms_half_steps():
    assert PropertyDraft(bathrooms=2.5).bathrooms == 2.5
    with pytest.raises(ValidationError):
        PropertyDraft(bathrooms=1.25)


def test_non_finite_numbers_rejected():
    """Test inf/nan refusés: le brouillon doit rester sérialisable en JSON"""
    with pytest.raises(ValidationError):
        PropertyDraft(bathrooms=float("inf"))
    with pytest.raises(ValidationError):
        PropertyDraft(price=float("nan"))
    with pytest.raises(ValidationError):
        PropertyDraft(latitude=float("nan"), longitude=float("inf"))


def test_store_rejects_non_finite_update():
    store = DraftStore()
    with pytest.raises(ValidationError):
        store.update_property_data({"bathrooms": float("inf")})
    assert store.property_data.bathrooms == 0


def test_features_keep_set_semantics():
    draft = PropertyDraft(features=["pool", "garden", "pool"])
    assert draft.features == ["pool", "garden"]


def test_images_need_exactly_one_primary():
    """Test invariant image principale"""
    first = Image(id="a", url="https://cdn/a.jpg", is_primary=True)
    second = Image(id="b", url="https://cdn/b.jpg", is_primary=False)

    draft = PropertyDraft(images=[first, second], primary_image_index=0)
    assert draft.images[0].is_primary

    with pytest.raises(ValidationError):
        PropertyDraft(images=[second])
    with pytest.raises(ValidationError):
        PropertyDraft(images=[first, second.model_copy(update={"is_primary": True})])
    with pytest.raises(ValidationError):
        PropertyDraft(images=[first, second], primary_image_index=1)


def test_primary_index_must_be_zero_without_images():
    with pytest.raises(ValidationError):
        PropertyDraft(primary_image_index=2)


def test_normalize_image_from_plain_url():
    """Test URL brute -> forme canonique"""
    image = normalize_image("https://cdn/x.jpg", is_primary=True)
    assert image.url == "https://cdn/x.jpg"
    assert image.is_primary is True
    assert image.id
    assert image.metadata is None


def test_normalize_image_from_widget_payload():
    """Test format Cloudinary (secure_url / public_id)"""
    image = normalize_image({
        "secure_url": "https://res.cloudinary.com/demo/a.jpg",
        "public_id": "props/a",
        "width": 1200,
        "height": 800,
        "format": "jpg",
        "original_filename": "salon"
    })
    assert image.id == "props/a"
    assert image.url == "https://res.cloudinary.com/demo/a.jpg"
    assert image.metadata.width == 1200
    assert image.metadata.original_filename == "salon"
    assert image.metadata.public_id == "props/a"


def test_normalize_image_without_url_rejected():
    with pytest.raises(ValueError):
        normalize_image({"id": "x"})
    with pytest.raises(ValueError):
        normalize_image(42)


def test_normalize_images_uses_index_then_flags():
    images = normalize_images(["https://cdn/1.jpg", "https://cdn/2.jpg"], primary_index=1)
    assert [img.is_primary for img in images] == [False, True]

    flagged = normalize_images([
        {"url": "https://cdn/1.jpg"},
        {"url": "https://cdn/2.jpg", "isPrimary": True},
    ], primary_index=0)
    assert [img.is_primary for img in flagged] == [False, True]

    out_of_range = normalize_images(["https://cdn/1.jpg"], primary_index=5)
    assert out_of_range[0].is_primary is True


def test_enum_values():
    """Test valeurs des enums"""
    assert WizardStep.basic_info.value == "basic-info"
    assert WizardStep.ai_summary.value == "ai-summary"
    assert PropertyStatus.pending.value == "pending"
    assert ListingType.rent.value == "rent"
