# tests/test_state.py
"""
Tests du store du brouillon
"""
import pytest
from pydantic import ValidationError

from app.models import WizardStep
from app.wizard.errors import UnknownFieldError
from app.wizard.state import STEP_FIELD, DraftStore


def test_updates_merge_in_call_order():
    """Test dernière écriture gagnante, champ par champ"""
    store = DraftStore()
    store.update_property_data({"title": "A", "city": "Madrid"})
    store.update_property_data({"title": "B"})
    store.update_property_data({"price": 100000, "city": "Sevilla"})

    draft = store.property_data
    assert draft.title == "B"
    assert draft.city == "Sevilla"
    assert draft.price == 100000


def test_lists_are_replaced_not_merged():
    store = DraftStore()
    store.update_property_data({"features": ["pool", "gym"]})
    store.update_property_data({"features": ["garden"]})
    assert store.property_data.features == ["garden"]


def test_camel_case_keys_accepted():
    store = DraftStore()
    store.update_property_data({"zipCode": "28013", "contact_email": "a@b.co"})
    assert store.property_data.zip_code == "28013"
    assert store.property_data.contact_email == "a@b.co"


def test_unknown_field_rejected_and_store_unchanged():
    store = DraftStore()
    with pytest.raises(UnknownFieldError) as exc:
        store.update_property_data({"title": "X", "colour": "red"})
    assert exc.value.fields == ["colour"]
    assert store.property_data.title == ""


def test_invalid_value_rejected_without_notification():
    store = DraftStore()
    seen = []
    store.subscribe(seen.append)

    with pytest.raises(ValidationError):
        store.update_property_data({"latitude": 12.0})

    assert store.property_data.latitude is None
    assert seen == []


def test_listeners_receive_changed_fields_in_order():
    store = DraftStore()
    calls = []
    store.subscribe(lambda changed: calls.append(("first", changed)))
    store.subscribe(lambda changed: calls.append(("second", changed)))

    store.update_property_data({"city": "Madrid", "country": "Spain"})

    assert calls == [
        ("first", {"city", "country"}),
        ("second", {"city", "country"}),
    ]


def test_failing_listener_does_not_break_update():
    """Test observateur en échec: mise à jour conservée, suivants notifiés"""
    store = DraftStore()
    calls = []

    def broken(changed):
        raise RuntimeError("no running event loop")

    store.subscribe(broken)
    store.subscribe(lambda changed: calls.append(changed))

    store.update_property_data({"title": "Loft"})

    assert store.property_data.title == "Loft"
    assert calls == [{"title"}]


def test_session_update_outside_event_loop(make_session):
    """Test mise à jour synchrone: la sauvegarde différée ne peut pas démarrer"""
    session = make_session()
    session.update_property_data({"title": "Loft"})
    assert session.property_data.title == "Loft"
    session.close()


def test_unsubscribe():
    store = DraftStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()
    store.update_property_data({"title": "X"})
    assert seen == []


def test_step_change_notifies():
    store = DraftStore()
    seen = []
    store.subscribe(seen.append)

    store.set_current_step(WizardStep.pricing)
    store.set_current_step(WizardStep.pricing)

    assert store.current_step == WizardStep.pricing
    assert seen == [{STEP_FIELD}]


def test_reset_restores_defaults():
    store = DraftStore()
    store.update_property_data({"title": "X"})
    store.set_current_step(WizardStep.images)

    store.reset_property_data()

    assert store.property_data.title == ""
    assert store.current_step == WizardStep.basic_info
