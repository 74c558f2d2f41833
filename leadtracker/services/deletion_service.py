"""Password-gated soft and permanent deletion of leads.

The password is a plaintext confirmation step kept in local storage so that
destructive clicks need a deliberate second action. It is not an access
control mechanism and is not hashed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from leadtracker.core.enums import PASSWORD_KEY, LifecycleState
from leadtracker.core.exceptions import NotFoundError, PasswordMismatchError, ValidationError
from leadtracker.database.kv_store import KeyValueStore
from leadtracker.orchestration.state_machine import LEAD_LIFECYCLE, lifecycle_state
from leadtracker.services.lead_store import LeadStore

logger = logging.getLogger(__name__)


@dataclass
class BulkDeleteResult:
    soft_deleted: list[str] = field(default_factory=list)
    permanently_deleted: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.soft_deleted) + len(self.permanently_deleted)


class DeletionService:
    """Lifecycle transitions for leads: delete, restore, purge."""

    def __init__(self, store: LeadStore, storage: KeyValueStore, default_password: str) -> None:
        self.store = store
        self._storage = storage
        self._default_password = default_password

    # ------------------------------------------------------------------
    # Password gate
    # ------------------------------------------------------------------

    def _current_password(self) -> str:
        stored = self._storage.get(PASSWORD_KEY)
        return stored if stored else self._default_password

    def check_password(self, password: str | None) -> bool:
        return password is not None and password == self._current_password()

    def _require_password(self, password: str | None, action: str) -> None:
        if not self.check_password(password):
            logger.warning("deletion.password_mismatch", extra={"event": "deletion.password_mismatch", "action": action})
            raise PasswordMismatchError("Incorrect password.")

    def change_password(self, current_password: str, new_password: str) -> None:
        self._require_password(current_password, action="change_password")
        if not new_password or not new_password.strip():
            raise ValidationError("New password must not be blank.")
        if not self._storage.set(PASSWORD_KEY, new_password):
            logger.error("deletion.password_persist_failed", extra={"event": "deletion.password_persist_failed"})
            return
        logger.info("deletion.password_changed", extra={"event": "deletion.password_changed"})

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(self, lead_id: str, target: LifecycleState) -> LifecycleState:
        lead = self.store.get(lead_id)
        if lead is None:
            raise NotFoundError(f"Lead {lead_id} not found.")
        LEAD_LIFECYCLE.assert_transition(lifecycle_state(lead.is_deleted), target)

        if target == LifecycleState.SOFT_DELETED:
            self.store.soft_delete(lead_id)
        elif target == LifecycleState.ACTIVE:
            self.store.restore(lead_id)
        else:
            self.store.permanently_delete(lead_id)
        return target

    def _delete_target(self, lead_id: str) -> LifecycleState:
        lead = self.store.get(lead_id)
        if lead is None:
            raise NotFoundError(f"Lead {lead_id} not found.")
        return LifecycleState.PERMANENTLY_REMOVED if lead.is_deleted else LifecycleState.SOFT_DELETED

    def delete(self, lead_id: str, password: str | None) -> LifecycleState:
        """Soft-delete an active lead, or permanently remove a soft-deleted one."""
        self._require_password(password, action="delete")
        return self._transition(lead_id, self._delete_target(lead_id))

    def permanently_delete(self, lead_id: str, password: str | None) -> LifecycleState:
        self._require_password(password, action="permanently_delete")
        return self._transition(lead_id, LifecycleState.PERMANENTLY_REMOVED)

    def restore(self, lead_id: str) -> LifecycleState:
        return self._transition(lead_id, LifecycleState.ACTIVE)

    def bulk_delete(self, lead_ids: Iterable[str], password: str | None) -> BulkDeleteResult:
        """One password check for the batch; each lead follows its own current state."""
        self._require_password(password, action="bulk_delete")
        result = BulkDeleteResult()
        for lead_id in dict.fromkeys(lead_ids):
            lead = self.store.get(lead_id)
            if lead is None:
                result.missing.append(lead_id)
                continue
            if self._transition(lead_id, self._delete_target(lead_id)) == LifecycleState.SOFT_DELETED:
                result.soft_deleted.append(lead_id)
            else:
                result.permanently_deleted.append(lead_id)

        logger.info(
            "deletion.bulk_completed",
            extra={
                "event": "deletion.bulk_completed",
                "soft_deleted": len(result.soft_deleted),
                "permanently_deleted": len(result.permanently_deleted),
                "missing": len(result.missing),
            },
        )
        return result

    def bulk_restore(self, lead_ids: Iterable[str]) -> list[str]:
        restored = []
        for lead_id in dict.fromkeys(lead_ids):
            lead = self.store.get(lead_id)
            if lead is not None and lead.is_deleted:
                self._transition(lead_id, LifecycleState.ACTIVE)
                restored.append(lead_id)
        return restored
