"""Add/edit submission flow: field validation, stamping and status shortcuts."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

from leadtracker.core.enums import DocumentStatus, LeadStatus, MandateStatus
from leadtracker.core.exceptions import LeadValidationError, NotFoundError
from leadtracker.schemas.leads import Activity, Lead, LeadForm, MobileNumber, normalize_main_flag
from leadtracker.services.lead_store import LeadStore
from leadtracker.utils.dates import format_day_first, is_day_first_format, local_now, parse_lead_date
from leadtracker.utils.ids import new_id
from leadtracker.utils.validators import extract_address_from_notes, is_valid_phone, sanitize_text

logger = logging.getLogger(__name__)


def validate_lead_form(form: LeadForm, today: date) -> dict[str, str]:
    """Return ``{field: message}`` for every problem; empty when the form is valid."""
    errors: dict[str, str] = {}

    if not form.kva.strip():
        errors["kva"] = "KVA is required"

    consumer_number = form.consumer_number.strip()
    if not consumer_number:
        errors["consumerNumber"] = "Consumer number is required"
    elif not is_valid_phone(consumer_number):
        errors["consumerNumber"] = "Please enter a valid consumer number"

    if not form.company.strip():
        errors["company"] = "Company name is required"
    if not form.client_name.strip():
        errors["clientName"] = "Client name is required"

    if not any(is_valid_phone(mobile.number) for mobile in form.mobile_numbers):
        errors["mobileNumbers"] = "At least one mobile number is required"
    for index, mobile in enumerate(form.mobile_numbers):
        if mobile.number.strip() and not is_valid_phone(mobile.number):
            errors[f"mobileNumber_{index}"] = "Please enter a valid mobile number"

    if form.connection_date and not is_day_first_format(form.connection_date.strip()):
        errors["connectionDate"] = "Please enter a valid connection date (DD-MM-YYYY)"

    if form.follow_up_date:
        follow_up = parse_lead_date(form.follow_up_date)
        if follow_up is None:
            errors["followUpDate"] = "Please enter a valid follow-up date"
        elif follow_up < today:
            errors["followUpDate"] = "Follow-up date cannot be in the past"

    return errors


def _clean_mobile_numbers(numbers: list[MobileNumber]) -> list[MobileNumber]:
    kept = [
        mobile.model_copy(update={"number": mobile.number.strip(), "name": sanitize_text(mobile.name) or None})
        for mobile in numbers
        if mobile.number.strip()
    ]
    kept = normalize_main_flag(kept)
    if kept and not any(mobile.is_main for mobile in kept):
        kept[0] = kept[0].model_copy(update={"is_main": True})
    return kept


class LeadFormService:
    """Turns submitted forms into stored leads."""

    def __init__(
        self,
        store: LeadStore,
        now: Callable[[], datetime] = local_now,
    ) -> None:
        self.store = store
        self._now = now

    def _validated_fields(self, form: LeadForm) -> dict:
        today = self._now().date()
        errors = validate_lead_form(form, today)
        if errors:
            logger.info("lead_form.rejected", extra={"event": "lead_form.rejected", "fields": sorted(errors)})
            raise LeadValidationError(errors)

        address, notes = extract_address_from_notes(sanitize_text(form.notes))
        company_location = sanitize_text(form.company_location) or address

        return {
            "kva": sanitize_text(form.kva),
            "connection_date": form.connection_date.strip(),
            "consumer_number": form.consumer_number.strip(),
            "company": sanitize_text(form.company),
            "client_name": sanitize_text(form.client_name),
            "mobile_numbers": _clean_mobile_numbers(form.mobile_numbers),
            "company_location": company_location,
            "discom": sanitize_text(form.discom) or None,
            "unit_type": form.unit_type,
            "status": form.status,
            # Always restamped; the submitted value is ignored.
            "last_activity_date": format_day_first(today),
            "follow_up_date": form.follow_up_date.strip(),
            "final_conclusion": sanitize_text(form.final_conclusion),
            "notes": notes,
        }

    def create(self, form: LeadForm) -> Lead:
        fields = self._validated_fields(form)
        lead_id = new_id()
        lead = Lead(
            id=lead_id,
            is_done=False,
            is_deleted=False,
            mandate_status=MandateStatus.PENDING,
            document_status=DocumentStatus.PENDING_DOCUMENTS,
            activities=[
                Activity(
                    id=new_id(),
                    lead_id=lead_id,
                    description="Lead created",
                    timestamp=self._now().isoformat(),
                )
            ],
            **fields,
        )
        return self.store.add(lead)

    def edit(self, lead_id: str, form: LeadForm) -> Lead:
        """Apply a form to an existing lead, keeping its history and lifecycle flags."""
        current = self.store.get(lead_id)
        if current is None:
            raise NotFoundError(f"Lead {lead_id} not found.")
        updated = current.model_copy(update=self._validated_fields(form))
        self.store.update(updated)
        return updated

    def change_status(self, lead_id: str, status: LeadStatus) -> Lead:
        current = self.store.get(lead_id)
        if current is None:
            raise NotFoundError(f"Lead {lead_id} not found.")
        if current.status == status:
            return current

        self.store.update(current.model_copy(update={"status": status}))
        self.store.append_activity(lead_id, f"Status changed from {current.status.value} to {status.value}")
        logger.info(
            "lead.status.updated",
            extra={"event": "lead.status.updated", "lead_id": lead_id, "status": status.value},
        )
        return self.store.get(lead_id)

    def mark_done(self, lead_id: str) -> Lead:
        lead = self.store.mark_done(lead_id)
        if lead is None:
            raise NotFoundError(f"Lead {lead_id} not found.")
        return lead
