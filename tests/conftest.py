# tests/conftest.py
"""
Fixtures communes: faux géocodeur, faux catalogue, stockage temporaire.
"""
import asyncio
import pytest

from app.models import CatalogResponse, GeocodingFailure, GeocodingResult
from app.wizard.errors import PersistenceError
from app.wizard.persistence import LocalDraftStorage
from app.wizard.session import WizardSession

# Délais courts pour les tests (secondes)
DELAY = 0.05
SETTLE = 0.2


class FakeGeocoder:
    """Géocodeur contrôlable: réponses par adresse, portes pour retarder."""

    def __init__(self, default=None):
        self.calls = []
        self.default = default or GeocodingResult(latitude=40.4168, longitude=-3.7038)
        self.results = {}
        self.gates = {}

    async def resolve(self, address):
        self.calls.append(address)
        gate = self.gates.get(address)
        if gate is not None:
            await gate.wait()
        result = self.results.get(address, self.default)
        if isinstance(result, Exception):
            raise result
        return result


class FakeCatalog:
    """Catalogue en mémoire enregistrant chaque appel."""

    def __init__(self):
        self.calls = []
        self.rows = {}
        self.fail_with = None
        self._next_id = 1

    def create(self, data):
        self.calls.append(("create", None, dict(data)))
        if self.fail_with:
            return CatalogResponse(success=False, error=self.fail_with)
        row_id = str(self._next_id)
        self._next_id += 1
        self.rows[row_id] = {**data, "id": row_id}
        return CatalogResponse(success=True, data=self.rows[row_id])

    def update(self, property_id, data):
        self.calls.append(("update", property_id, dict(data)))
        if self.fail_with:
            return CatalogResponse(success=False, error=self.fail_with)
        self.rows[property_id] = {**data, "id": property_id}
        return CatalogResponse(success=True, data=self.rows[property_id])


class FailingStorage(LocalDraftStorage):
    """Stockage dont l'écriture échoue (quota dépassé)."""

    def __init__(self, directory):
        super().__init__(directory)
        self.fail = True

    def write(self, key, record):
        if self.fail:
            raise PersistenceError("QuotaExceededError")
        super().write(key, record)


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def storage(tmp_path):
    return LocalDraftStorage(str(tmp_path / "drafts"))


@pytest.fixture
def make_session(storage, geocoder, catalog):
    """Fabrique de sessions avec délais courts."""
    def _make(user_key="agent-1", **kwargs):
        options = {
            "autosave_delay": DELAY,
            "geocoding_delay": DELAY,
        }
        options.update(kwargs)
        return WizardSession.open(
            user_key,
            options.pop("storage", storage),
            options.pop("geocoder", geocoder),
            options.pop("catalog", catalog),
            **options
        )
    return _make


def complete_listing():
    """Brouillon complet, prêt à publier (hors images)."""
    return {
        "title": "Modern Loft Downtown",
        "description": "Bright loft with exposed brick, open kitchen and skyline views.",
        "propertyType": "apartment",
        "listingType": "sell",
        "price": 350000,
        "bedrooms": 2,
        "bathrooms": 1.5,
        "squareFeet": 980,
        "city": "Madrid",
        "country": "Spain",
        "approximateLocation": "Malasaña",
        "contactEmail": "agent@example.com",
        "phoneCountryCode": "+34",
        "phoneNumber": "600123123",
    }


def run(coro):
    return asyncio.run(coro)


__all__ = ["FakeGeocoder", "FakeCatalog", "FailingStorage", "GeocodingFailure", "complete_listing", "run"]
