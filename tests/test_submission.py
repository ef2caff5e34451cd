# tests/test_submission.py
"""
Tests de l'enregistrement et de la publication
"""
import asyncio

import pytest

from app.core.config import settings
from app.crud.property import PropertyCRUD, draft_to_catalog_payload
from app.db import SupabaseClient
from app.models import PropertyDraft, PropertyStatus, SummarySuggestion

from conftest import complete_listing, run


def test_payload_shape():
    draft = PropertyDraft.model_validate({**complete_listing(), "id": "42", "showExactAddress": True})
    payload = draft_to_catalog_payload(draft, PropertyStatus.pending)

    assert payload["status"] == "pending"
    assert payload["area_sqm"] == 980
    assert payload["title"] == "Modern Loft Downtown"
    assert "square_feet" not in payload
    assert "id" not in payload
    assert "show_exact_address" not in payload


def test_publish_blocked_locally_when_fields_missing(make_session, catalog):
    """Test Modern Loft Downtown sans email: aucun appel réseau"""
    async def scenario():
        session = make_session()
        session.update_property_data({"title": "Modern Loft Downtown", "contactEmail": ""})
        result = await session.submission.publish_property()
        session.close()
        return session, result

    session, result = run(scenario())
    assert result.success is False
    assert "Contact Email" in result.missing_fields
    assert catalog.calls == []
    assert session.property_data.title == "Modern Loft Downtown"


def test_publish_sends_selected_status_once(make_session, catalog, storage):
    """Test publication complète: un seul appel avec le statut choisi"""
    async def scenario():
        session = make_session()
        session.update_property_data({
            **complete_listing(),
            "images": ["https://cdn/img1.jpg"],
            "status": "pending",
        })
        result = await session.submission.publish_property()
        session.close()
        return session, result

    session, result = run(scenario())
    assert result.success is True
    assert result.status == "pending"
    assert len(catalog.calls) == 1
    action, _, payload = catalog.calls[0]
    assert action == "create"
    assert payload["status"] == "pending"
    assert payload["images"][0]["url"] == "https://cdn/img1.jpg"

    # Publication réussie: brouillon local effacé
    assert storage.read(session.key) is None
    assert session.property_data.title == ""


def test_save_draft_twice_updates_instead_of_duplicating(make_session, catalog):
    async def scenario():
        session = make_session()
        session.update_property_data({"title": "Loft"})
        first = await session.submission.save_draft()
        second = await session.submission.save_draft()
        session.close()
        return session, first, second

    session, first, second = run(scenario())
    assert first.success and second.success
    assert [call[0] for call in catalog.calls] == ["create", "update"]
    assert catalog.calls[1][1] == "1"
    assert all(call[2]["status"] == "draft" for call in catalog.calls)
    assert session.property_data.id == "1"


def test_concurrent_saves_create_a_single_row(make_session, catalog):
    """Test deux enregistrements simultanés: une création puis une mise à jour"""
    async def scenario():
        session = make_session()
        session.update_property_data({"title": "Loft"})
        results = await asyncio.gather(
            session.submission.save_draft(),
            session.submission.save_draft(),
        )
        session.close()
        return session, results

    session, results = run(scenario())
    assert all(result.success for result in results)
    assert [call[0] for call in catalog.calls] == ["create", "update"]
    assert catalog.calls[1][1] == "1"
    assert len(catalog.rows) == 1
    assert session.property_data.id == "1"


def test_catalog_failure_keeps_draft(make_session, catalog):
    """Test refus du catalogue: brouillon conservé, nouvelle tentative possible"""
    catalog.fail_with = "Network error"

    async def scenario():
        session = make_session()
        session.update_property_data({**complete_listing(), "images": ["https://cdn/1.jpg"]})
        failed = await session.submission.publish_property()

        catalog.fail_with = None
        retried = await session.submission.publish_property()
        session.close()
        return session, failed, retried

    session, failed, retried = run(scenario())
    assert failed.success is False
    assert failed.error == "Network error"
    assert retried.success is True
    assert [call[0] for call in catalog.calls] == ["create", "create"]
    assert session.submission.last_error is None


def test_catalog_exception_is_reported(make_session, catalog):
    def explode(data):
        raise ConnectionError("unreachable")

    catalog.create = explode

    async def scenario():
        session = make_session()
        session.update_property_data({"title": "Loft"})
        result = await session.submission.save_draft()
        session.close()
        return session, result

    session, result = run(scenario())
    assert result.success is False
    assert result.error == "unreachable"
    assert session.property_data.title == "Loft"
    assert session.submission.is_submitting is False


def test_session_snapshot(make_session):
    async def scenario():
        session = make_session()
        session.update_property_data(complete_listing())
        snapshot = session.snapshot()
        session.close()
        return snapshot

    snapshot = run(scenario())
    assert snapshot["currentStep"] == "basic-info"
    assert snapshot["displayStep"] == 1
    assert snapshot["propertyData"]["title"] == "Modern Loft Downtown"
    assert snapshot["missingFields"] == ["Images"]
    assert snapshot["savePending"] is True
    assert snapshot["geocoding"]["state"] == "idle"
    assert snapshot["remainingImageSlots"] == 10
    assert len(snapshot["steps"]) == 7


def test_session_summary_applied(make_session):
    class StubGenerator:
        async def generate(self, draft):
            return SummarySuggestion(title="Sunny Loft", description="Walk to everything.")

    async def scenario():
        session = make_session(summary_generator=StubGenerator())
        session.update_property_data(complete_listing())
        suggestion = await session.generate_summary(apply=True)
        session.close()
        return session, suggestion

    session, suggestion = run(scenario())
    assert suggestion.title == "Sunny Loft"
    assert session.property_data.title == "Sunny Loft"
    assert session.property_data.description == "Walk to everything."


class _Result:
    def __init__(self, data):
        self.data = data


class _Query:
    """Requête Supabase minimale: insert/update + eq + execute"""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = None
        self.payload = None
        self.filters = {}

    def insert(self, data):
        self.action, self.payload = "insert", data
        return self

    def update(self, data):
        self.action, self.payload = "update", data
        return self

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def execute(self):
        self.db.executed.append((self.table, self.action, self.payload, dict(self.filters)))
        if self.db.error:
            raise RuntimeError(self.db.error)
        if self.action == "update" and self.filters.get("id") not in self.db.rows:
            return _Result([])
        row_id = self.filters.get("id", "p-1")
        self.db.rows[row_id] = {**self.payload, "id": row_id}
        return _Result([self.db.rows[row_id]])


class _FakeSupabase:
    def __init__(self):
        self.executed = []
        self.rows = {}
        self.error = None

    def table(self, name):
        return _Query(self, name)


def test_property_crud_create_and_update():
    """Test CRUD catalogue sur la table properties"""
    db = _FakeSupabase()
    crud = PropertyCRUD(db)

    created = crud.create({"title": "Loft", "status": "draft"})
    assert created.success is True
    assert created.data["id"] == "p-1"

    updated = crud.update("p-1", {"title": "Loft 2"})
    assert updated.success is True
    assert db.executed[-1] == ("properties", "update", {"title": "Loft 2"}, {"id": "p-1"})

    assert crud.update("missing", {"title": "X"}).success is False
    assert crud.update("p-1", {}).success is False


def test_property_crud_reports_errors():
    db = _FakeSupabase()
    db.error = "connection reset"
    response = PropertyCRUD(db).create({"title": "Loft"})
    assert response.success is False
    assert response.error == "connection reset"


def test_supabase_requires_credentials(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", "")
    monkeypatch.setattr(SupabaseClient, "_instance", None)
    with pytest.raises(ValueError):
        SupabaseClient.get_client()
