"""Pure filtering, search and sorting over lead snapshots."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from leadtracker.schemas.leads import Lead, LeadFilters, SavedView
from leadtracker.utils.dates import parse_lead_date
from leadtracker.utils.validators import digits_only


def _searchable_fields(lead: Lead) -> list[str]:
    contact_names = [mobile.name for mobile in lead.mobile_numbers if mobile.name]
    fields = [
        lead.client_name,
        lead.company,
        *lead.phone_numbers,
        *contact_names,
        lead.consumer_number,
        lead.kva,
        lead.discom or "",
        lead.company_location,
        lead.notes,
        lead.final_conclusion,
        lead.status.value,
    ]
    return [field.lower() for field in fields if field]


def matches_search(lead: Lead, search_term: str | None) -> bool:
    """Free-text match with a formatting-tolerant phone lookup.

    A digit-only term is first compared against each phone number with its
    punctuation stripped; the plain case-insensitive substring search over the
    text fields runs either way.
    """
    term = (search_term or "").strip()
    if not term:
        return True

    if term.isdigit():
        for number in lead.phone_numbers:
            if term in digits_only(number):
                return True

    lowered = term.lower()
    return any(lowered in field for field in _searchable_fields(lead))


def _within_follow_up_range(lead: Lead, start: date | None, end: date | None) -> bool:
    if start is None and end is None:
        return True
    follow_up = parse_lead_date(lead.follow_up_date)
    if follow_up is None:
        return False
    if start is not None and follow_up < start:
        return False
    if end is not None and follow_up > end:
        return False
    return True


def filter_leads(leads: Iterable[Lead], criteria: LeadFilters | None = None) -> list[Lead]:
    """Return the leads satisfying every populated criterion, in input order."""
    criteria = criteria or LeadFilters()
    allowed_statuses = set(criteria.status or ())
    start = parse_lead_date(criteria.follow_up_date_start)
    end = parse_lead_date(criteria.follow_up_date_end)

    selected = []
    for lead in leads:
        if criteria.is_deleted is not None and lead.is_deleted != criteria.is_deleted:
            continue
        if criteria.is_done is not None and lead.is_done != criteria.is_done:
            continue
        if allowed_statuses and lead.status not in allowed_statuses:
            continue
        if not _within_follow_up_range(lead, start, end):
            continue
        if not matches_search(lead, criteria.search_term):
            continue
        selected.append(lead)
    return selected


def apply_saved_view(leads: Iterable[Lead], view: SavedView) -> list[Lead]:
    return filter_leads(leads, view.filters)


# ----------------------------------------------------------------------
# Sorting
# ----------------------------------------------------------------------


class SortField(str, Enum):
    KVA = "kva"
    CONNECTION_DATE = "connectionDate"
    CONSUMER_NUMBER = "consumerNumber"
    COMPANY = "company"
    CLIENT_NAME = "clientName"
    MOBILE_NUMBER = "mobileNumber"
    UNIT_TYPE = "unitType"
    STATUS = "status"
    LAST_ACTIVITY_DATE = "lastActivityDate"
    FOLLOW_UP_DATE = "followUpDate"
    IS_DONE = "isDone"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


_SORT_ACCESSORS: dict[SortField, Callable[[Lead], Any]] = {
    SortField.KVA: lambda lead: lead.kva,
    SortField.CONNECTION_DATE: lambda lead: parse_lead_date(lead.connection_date),
    SortField.CONSUMER_NUMBER: lambda lead: lead.consumer_number,
    SortField.COMPANY: lambda lead: lead.company,
    SortField.CLIENT_NAME: lambda lead: lead.client_name,
    SortField.MOBILE_NUMBER: lambda lead: lead.main_number,
    SortField.UNIT_TYPE: lambda lead: lead.unit_type.value,
    SortField.STATUS: lambda lead: lead.status.value,
    SortField.LAST_ACTIVITY_DATE: lambda lead: parse_lead_date(lead.last_activity_date),
    SortField.FOLLOW_UP_DATE: lambda lead: parse_lead_date(lead.follow_up_date),
    SortField.IS_DONE: lambda lead: lead.is_done,
}


def _sort_key(field: SortField) -> Callable[[Lead], tuple]:
    accessor = _SORT_ACCESSORS[field]

    def key(lead: Lead) -> tuple:
        value = accessor(lead)
        if value is None or value == "":
            return (1, ())
        if isinstance(value, str):
            # Case-folded first so "acme" and "ACME" collate together.
            return (0, (value.casefold(), value))
        return (0, (value,))

    return key


@dataclass(frozen=True)
class SortState:
    """Current sort column and direction, as toggled by column-header clicks."""

    field: SortField | None = None
    direction: SortDirection = SortDirection.ASC

    def toggle(self, field: SortField) -> "SortState":
        if self.field == field:
            flipped = SortDirection.DESC if self.direction == SortDirection.ASC else SortDirection.ASC
            return SortState(field=field, direction=flipped)
        return SortState(field=field, direction=SortDirection.ASC)


def sort_leads(leads: Iterable[Lead], state: SortState) -> list[Lead]:
    """Sort by the state's field; descending is the exact reverse of ascending."""
    items = list(leads)
    if state.field is None:
        return items
    ordered = sorted(items, key=_sort_key(state.field))
    if state.direction == SortDirection.DESC:
        ordered.reverse()
    return ordered
