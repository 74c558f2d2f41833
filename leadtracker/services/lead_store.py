"""Canonical lead collection with write-through persistence."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import ValidationError as SchemaValidationError

from leadtracker.core.enums import LEADS_KEY, SAVED_VIEWS_KEY
from leadtracker.database.kv_store import KeyValueStore, load_json, save_json
from leadtracker.schemas.leads import Activity, Lead, SavedView
from leadtracker.utils.dates import local_now
from leadtracker.utils.ids import new_id

logger = logging.getLogger(__name__)


class LeadStore:
    """Owns the lead collection and saved views.

    Every mutation swaps in a new immutable snapshot and writes the whole
    collection back to storage before returning. A failed write is logged and
    the in-memory change is kept. Stored records that no longer parse are held
    as raw values and written back untouched.
    """

    def __init__(self, storage: KeyValueStore, now: Callable[[], datetime] = local_now) -> None:
        self._storage = storage
        self._now = now
        self._leads: tuple[Lead, ...] = ()
        self._saved_views: tuple[SavedView, ...] = ()
        self._unreadable_leads: tuple[Any, ...] = ()
        self._unreadable_views: tuple[Any, ...] = ()
        self.reload()

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Rebuild in-memory state from storage; missing keys mean empty."""
        leads, self._unreadable_leads = self._load_records(LEADS_KEY, Lead.from_record)
        views, self._unreadable_views = self._load_records(SAVED_VIEWS_KEY, SavedView.model_validate)
        self._leads = tuple(leads)
        self._saved_views = tuple(views)
        logger.info(
            "lead_store.loaded",
            extra={"event": "lead_store.loaded", "leads": len(self._leads), "saved_views": len(self._saved_views)},
        )

    def _load_records(self, key: str, parse: Callable[[dict], Any]) -> tuple[list, tuple[Any, ...]]:
        raw = load_json(self._storage, key, [])
        if not isinstance(raw, list):
            logger.warning("lead_store.unexpected_shape", extra={"event": "lead_store.unexpected_shape", "key": key})
            return [], ()

        records = []
        unreadable = []
        for position, item in enumerate(raw):
            try:
                records.append(parse(item))
            except SchemaValidationError:
                unreadable.append(item)
                logger.warning(
                    "lead_store.record_skipped",
                    extra={"event": "lead_store.record_skipped", "key": key, "position": position},
                )
        return records, tuple(unreadable)

    def _lead_payload(self) -> list[Any]:
        return [lead.to_record() for lead in self._leads] + list(self._unreadable_leads)

    def _persist_leads(self) -> None:
        if not save_json(self._storage, LEADS_KEY, self._lead_payload()):
            logger.error("lead_store.persist_failed", extra={"event": "lead_store.persist_failed", "key": LEADS_KEY})

    def _persist_saved_views(self) -> None:
        payload = [view.model_dump(mode="json", by_alias=True) for view in self._saved_views]
        payload.extend(self._unreadable_views)
        if not save_json(self._storage, SAVED_VIEWS_KEY, payload):
            logger.error(
                "lead_store.persist_failed",
                extra={"event": "lead_store.persist_failed", "key": SAVED_VIEWS_KEY},
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def leads(self) -> tuple[Lead, ...]:
        """Immutable snapshot of every lead, soft-deleted ones included."""
        return self._leads

    def get(self, lead_id: str) -> Lead | None:
        for lead in self._leads:
            if lead.id == lead_id:
                return lead
        return None

    def __len__(self) -> int:
        return len(self._leads)

    def _index_of(self, lead_id: str) -> int | None:
        for index, lead in enumerate(self._leads):
            if lead.id == lead_id:
                return index
        return None

    def _replace_at(self, index: int, lead: Lead) -> None:
        leads = list(self._leads)
        leads[index] = lead
        self._leads = tuple(leads)
        self._persist_leads()

    def _change(self, lead_id: str, **changes) -> Lead | None:
        index = self._index_of(lead_id)
        if index is None:
            return None
        current = self._leads[index]
        if all(getattr(current, field) == value for field, value in changes.items()):
            return current
        updated = current.model_copy(update=changes)
        self._replace_at(index, updated)
        return updated

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, lead: Lead) -> Lead:
        """Insert a lead; an existing record with the same id is overwritten in place."""
        index = self._index_of(lead.id)
        if index is not None:
            logger.warning("lead.add.duplicate_id", extra={"event": "lead.add.duplicate_id", "lead_id": lead.id})
            self._replace_at(index, lead)
            return lead

        self._leads = self._leads + (lead,)
        self._persist_leads()
        logger.info("lead.created", extra={"event": "lead.created", "lead_id": lead.id})
        return lead

    def update(self, lead: Lead) -> Lead | None:
        index = self._index_of(lead.id)
        if index is None:
            return None
        self._replace_at(index, lead)
        logger.info("lead.updated", extra={"event": "lead.updated", "lead_id": lead.id})
        return lead

    def soft_delete(self, lead_id: str) -> Lead | None:
        lead = self._change(lead_id, is_deleted=True)
        if lead is not None:
            logger.info("lead.soft_deleted", extra={"event": "lead.soft_deleted", "lead_id": lead_id})
        return lead

    def restore(self, lead_id: str) -> Lead | None:
        lead = self._change(lead_id, is_deleted=False)
        if lead is not None:
            logger.info("lead.restored", extra={"event": "lead.restored", "lead_id": lead_id})
        return lead

    def permanently_delete(self, lead_id: str) -> bool:
        index = self._index_of(lead_id)
        if index is None:
            return False
        self._leads = self._leads[:index] + self._leads[index + 1 :]
        self._persist_leads()
        logger.info("lead.permanently_deleted", extra={"event": "lead.permanently_deleted", "lead_id": lead_id})
        return True

    def mark_done(self, lead_id: str) -> Lead | None:
        lead = self._change(lead_id, is_done=True)
        if lead is not None:
            logger.info("lead.marked_done", extra={"event": "lead.marked_done", "lead_id": lead_id})
        return lead

    def append_activity(self, lead_id: str, description: str) -> Activity | None:
        """Append an audit entry and move ``last_activity_date`` to the same instant."""
        index = self._index_of(lead_id)
        if index is None:
            return None

        timestamp = self._now().isoformat()
        activity = Activity(id=new_id(), lead_id=lead_id, description=description, timestamp=timestamp)
        current = self._leads[index]
        self._replace_at(
            index,
            current.model_copy(
                update={"activities": [*current.activities, activity], "last_activity_date": timestamp}
            ),
        )
        return activity

    # ------------------------------------------------------------------
    # Saved views
    # ------------------------------------------------------------------

    def saved_views(self) -> tuple[SavedView, ...]:
        return self._saved_views

    def add_saved_view(self, view: SavedView) -> SavedView:
        views = [existing for existing in self._saved_views if existing.id != view.id]
        views.append(view)
        self._saved_views = tuple(views)
        self._persist_saved_views()
        return view

    def delete_saved_view(self, view_id: str) -> bool:
        views = tuple(view for view in self._saved_views if view.id != view_id)
        if len(views) == len(self._saved_views):
            return False
        self._saved_views = views
        self._persist_saved_views()
        return True
