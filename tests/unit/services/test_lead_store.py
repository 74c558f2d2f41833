from __future__ import annotations

import json

from leadtracker.core.enums import LEADS_KEY, SAVED_VIEWS_KEY, LeadStatus
from leadtracker.schemas.leads import LeadFilters, SavedView
from leadtracker.services.lead_store import LeadStore

from tests.conftest import FIXED_NOW


def test_add_persists_and_reload_restores_same_state(store, storage, make_lead):
    lead = make_lead(notes="Call after lunch")
    store.add(lead)

    reloaded = LeadStore(storage)
    assert reloaded.leads() == (lead,)


def test_add_with_duplicate_id_replaces_in_place(store, make_lead):
    first = make_lead(id="same", client_name="Old")
    other = make_lead()
    store.add(first)
    store.add(other)

    store.add(make_lead(id="same", client_name="New"))

    assert [lead.client_name for lead in store.leads()] == ["New", other.client_name]


def test_update_unknown_id_is_noop(store, make_lead):
    store.add(make_lead(id="a"))
    assert store.update(make_lead(id="missing")) is None
    assert [lead.id for lead in store.leads()] == ["a"]


def test_soft_delete_then_restore_round_trips(store, make_lead):
    original = make_lead()
    store.add(original)

    deleted = store.soft_delete(original.id)
    assert deleted.is_deleted is True
    assert store.soft_delete(original.id).is_deleted is True

    restored = store.restore(original.id)
    assert restored == original
    assert restored.to_record() == original.to_record()


def test_soft_deleted_lead_stays_in_collection(store, make_lead):
    lead = make_lead()
    store.add(lead)
    store.soft_delete(lead.id)
    assert store.get(lead.id) is not None
    assert len(store) == 1


def test_permanently_delete_removes_record(store, storage, make_lead):
    lead = make_lead()
    store.add(lead)
    assert store.permanently_delete(lead.id) is True
    assert store.permanently_delete(lead.id) is False
    assert LeadStore(storage).leads() == ()


def test_mark_done_is_one_way(store, make_lead):
    lead = make_lead()
    store.add(lead)
    assert store.mark_done(lead.id).is_done is True
    assert store.mark_done("missing") is None


def test_append_activity_stamps_last_activity(store, make_lead):
    lead = make_lead(activities=[])
    store.add(lead)

    activity = store.append_activity(lead.id, "Called, no answer")

    stored = store.get(lead.id)
    assert stored.activities == [activity]
    assert activity.lead_id == lead.id
    assert activity.timestamp == FIXED_NOW.isoformat()
    assert stored.last_activity_date == FIXED_NOW.isoformat()


def test_append_activity_keeps_existing_order(store, make_lead):
    lead = make_lead()
    store.add(lead)
    store.append_activity(lead.id, "first")
    store.append_activity(lead.id, "second")
    assert [a.description for a in store.get(lead.id).activities] == ["first", "second"]


def test_missing_keys_load_as_empty(storage):
    store = LeadStore(storage)
    assert store.leads() == ()
    assert store.saved_views() == ()


def test_corrupt_payload_falls_back_to_empty(storage):
    storage.set(LEADS_KEY, "{not json")
    storage.set(SAVED_VIEWS_KEY, '{"unexpected": "object"}')
    store = LeadStore(storage)
    assert store.leads() == ()
    assert store.saved_views() == ()


def test_invalid_record_is_skipped(storage):
    storage.set(LEADS_KEY, '[{"clientName": "no id"}, {"id": "ok", "clientName": "Kept"}]')
    store = LeadStore(storage)
    assert [lead.id for lead in store.leads()] == ["ok"]


def test_null_lists_from_older_records_load(storage):
    storage.set(
        LEADS_KEY,
        '[{"id": "old-1", "clientName": "Legacy", "mobileNumber": "98765", '
        '"activities": null, "unitType": null, "status": null}]',
    )
    lead = LeadStore(storage).get("old-1")
    assert lead is not None
    assert lead.activities == []
    assert lead.main_number == "98765"
    assert lead.status == LeadStatus.NEW


def test_unparseable_record_survives_later_writes(storage, make_lead):
    storage.set(LEADS_KEY, '[{"clientName": "no id"}, {"id": "ok", "clientName": "Kept"}]')
    store = LeadStore(storage)
    store.add(make_lead())

    stored = json.loads(storage.get(LEADS_KEY))
    assert {"clientName": "no id"} in stored
    assert [lead.id for lead in LeadStore(storage).leads()] == ["ok", "lead-1"]


def test_failed_write_keeps_in_memory_change(make_lead):
    class BrokenStorage:
        def get(self, key):
            return None

        def set(self, key, value):
            return False

        def delete(self, key):
            return False

    store = LeadStore(BrokenStorage())
    lead = make_lead()
    store.add(lead)
    assert store.get(lead.id) == lead


def test_saved_views_round_trip(store, storage):
    view = SavedView(
        id="v1",
        name="Hot this month",
        filters=LeadFilters(status=[LeadStatus.HOTLEAD], follow_up_date_start="2025-03-01"),
    )
    store.add_saved_view(view)

    reloaded = LeadStore(storage)
    assert reloaded.saved_views() == (view,)

    assert reloaded.delete_saved_view("v1") is True
    assert reloaded.delete_saved_view("v1") is False
    assert LeadStore(storage).saved_views() == ()
