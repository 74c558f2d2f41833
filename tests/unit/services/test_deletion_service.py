from __future__ import annotations

import pytest

from leadtracker.core.enums import PASSWORD_KEY, LifecycleState
from leadtracker.core.exceptions import NotFoundError, PasswordMismatchError, ValidationError
from leadtracker.orchestration.state_machine import InvalidTransitionError
from leadtracker.services.deletion_service import DeletionService


@pytest.fixture
def deletion(store, storage):
    return DeletionService(store, storage, default_password="secret")


def test_delete_requires_matching_password(deletion, store, make_lead):
    lead = make_lead()
    store.add(lead)

    with pytest.raises(PasswordMismatchError):
        deletion.delete(lead.id, "wrong")
    assert store.get(lead.id).is_deleted is False


def test_delete_soft_then_permanent(deletion, store, make_lead):
    lead = make_lead()
    store.add(lead)

    assert deletion.delete(lead.id, "secret") == LifecycleState.SOFT_DELETED
    assert store.get(lead.id).is_deleted is True

    assert deletion.delete(lead.id, "secret") == LifecycleState.PERMANENTLY_REMOVED
    assert store.get(lead.id) is None


def test_restore_returns_lead_to_active(deletion, store, make_lead):
    lead = make_lead()
    store.add(lead)
    deletion.delete(lead.id, "secret")

    assert deletion.restore(lead.id) == LifecycleState.ACTIVE
    assert store.get(lead.id) == lead


def test_restore_of_active_lead_is_rejected(deletion, store, make_lead):
    lead = make_lead()
    store.add(lead)
    with pytest.raises(InvalidTransitionError):
        deletion.restore(lead.id)


def test_permanent_delete_of_active_lead(deletion, store, make_lead):
    lead = make_lead()
    store.add(lead)
    deletion.permanently_delete(lead.id, "secret")
    assert store.leads() == ()


def test_unknown_lead_raises_not_found(deletion):
    with pytest.raises(NotFoundError):
        deletion.delete("nope", "secret")


def test_bulk_delete_resolves_each_lead_independently(deletion, store, make_lead):
    active = make_lead()
    already_deleted = make_lead(is_deleted=True)
    store.add(active)
    store.add(already_deleted)

    result = deletion.bulk_delete([active.id, already_deleted.id, "ghost", active.id], "secret")

    assert result.soft_deleted == [active.id]
    assert result.permanently_deleted == [already_deleted.id]
    assert result.missing == ["ghost"]
    assert result.processed == 2
    assert [lead.id for lead in store.leads()] == [active.id]
    assert store.get(active.id).is_deleted is True


def test_bulk_delete_checks_password_once_before_any_change(deletion, store, make_lead):
    lead = make_lead()
    store.add(lead)
    with pytest.raises(PasswordMismatchError):
        deletion.bulk_delete([lead.id], "nope")
    assert store.get(lead.id).is_deleted is False


def test_bulk_restore_skips_active_leads(deletion, store, make_lead):
    deleted = make_lead(is_deleted=True)
    active = make_lead()
    store.add(deleted)
    store.add(active)
    assert deletion.bulk_restore([deleted.id, active.id, "ghost"]) == [deleted.id]
    assert store.get(deleted.id).is_deleted is False


def test_change_password_requires_current_secret(deletion, storage):
    with pytest.raises(PasswordMismatchError):
        deletion.change_password("wrong", "new-secret")

    deletion.change_password("secret", "new-secret")
    assert storage.get(PASSWORD_KEY) == "new-secret"
    assert deletion.check_password("new-secret") is True
    assert deletion.check_password("secret") is False


def test_change_password_rejects_blank(deletion):
    with pytest.raises(ValidationError):
        deletion.change_password("secret", "   ")


def test_stored_password_survives_new_service(store, storage):
    DeletionService(store, storage, default_password="secret").change_password("secret", "rotated")
    assert DeletionService(store, storage, default_password="secret").check_password("rotated") is True
