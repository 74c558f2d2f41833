"""Date- and status-bucketed projections of the lead collection.

Each predicate takes the lead and a reference date (normally today) and only
considers leads that are neither done nor deleted. Follow-up dates that do
not parse never match a date bucket.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from leadtracker.core.enums import LeadStatus
from leadtracker.schemas.leads import Lead
from leadtracker.utils.dates import end_of_week, parse_lead_date

DEFAULT_UPCOMING_DAYS = 7

LeadPredicate = Callable[[Lead, date], bool]


def _is_open(lead: Lead) -> bool:
    return not lead.is_done and not lead.is_deleted


def _open_follow_up(lead: Lead) -> date | None:
    if not _is_open(lead):
        return None
    return parse_lead_date(lead.follow_up_date)


def is_due_today(lead: Lead, reference: date) -> bool:
    follow_up = _open_follow_up(lead)
    return follow_up is not None and follow_up == reference


def is_overdue(lead: Lead, reference: date) -> bool:
    follow_up = _open_follow_up(lead)
    return follow_up is not None and follow_up < reference


def is_upcoming(lead: Lead, reference: date, days: int = DEFAULT_UPCOMING_DAYS) -> bool:
    follow_up = _open_follow_up(lead)
    return follow_up is not None and reference < follow_up <= reference + timedelta(days=days)


def is_this_week(lead: Lead, reference: date) -> bool:
    follow_up = _open_follow_up(lead)
    return follow_up is not None and reference < follow_up <= end_of_week(reference)


def is_pending_documentation(lead: Lead, reference: date | None = None) -> bool:
    return _is_open(lead) and lead.status == LeadStatus.DOCUMENTATION


def is_mandate_sent(lead: Lead, reference: date | None = None) -> bool:
    return _is_open(lead) and lead.status == LeadStatus.MANDATE_SENT


def _select(leads: Iterable[Lead], predicate: LeadPredicate, reference: date) -> list[Lead]:
    return [lead for lead in leads if predicate(lead, reference)]


def due_today(leads: Iterable[Lead], reference: date) -> list[Lead]:
    return _select(leads, is_due_today, reference)


def overdue(leads: Iterable[Lead], reference: date) -> list[Lead]:
    return _select(leads, is_overdue, reference)


def upcoming(leads: Iterable[Lead], reference: date, days: int = DEFAULT_UPCOMING_DAYS) -> list[Lead]:
    return [lead for lead in leads if is_upcoming(lead, reference, days=days)]


def this_week(leads: Iterable[Lead], reference: date) -> list[Lead]:
    return _select(leads, is_this_week, reference)


def pending_documentation(leads: Iterable[Lead]) -> list[Lead]:
    return [lead for lead in leads if is_pending_documentation(lead)]


def mandate_sent(leads: Iterable[Lead]) -> list[Lead]:
    return [lead for lead in leads if is_mandate_sent(lead)]


def all_leads(leads: Iterable[Lead]) -> list[Lead]:
    """Every lead that has not been soft-deleted, done or not."""
    return [lead for lead in leads if not lead.is_deleted]


def active_leads(leads: Iterable[Lead]) -> list[Lead]:
    return [lead for lead in leads if _is_open(lead)]


def deleted_leads(leads: Iterable[Lead]) -> list[Lead]:
    """Soft-deleted leads awaiting restore or permanent removal."""
    return [lead for lead in leads if lead.is_deleted]


def reminders(
    leads: Iterable[Lead],
    start: date | None = None,
    end: date | None = None,
    status: LeadStatus | None = None,
    include_done: bool = False,
    descending: bool = False,
) -> list[Lead]:
    """Follow-up list for an inclusive date range, ordered by follow-up date.

    Leads without a usable follow-up date drop out once a bound is given and
    otherwise sort after dated ones.
    """
    dated: list[tuple[date, Lead]] = []
    undated: list[Lead] = []
    for lead in leads:
        if lead.is_deleted or (lead.is_done and not include_done):
            continue
        if status is not None and lead.status != status:
            continue
        follow_up = parse_lead_date(lead.follow_up_date)
        if follow_up is None:
            if start is None and end is None:
                undated.append(lead)
            continue
        if start is not None and follow_up < start:
            continue
        if end is not None and follow_up > end:
            continue
        dated.append((follow_up, lead))

    dated.sort(key=lambda pair: pair[0], reverse=descending)
    return [lead for _, lead in dated] + undated


@dataclass(frozen=True)
class DashboardCounts:
    total: int
    active: int
    due_today: int
    overdue: int
    upcoming: int
    pending_documentation: int
    mandate_sent: int
    deleted: int


def dashboard_counts(
    leads: Iterable[Lead], reference: date, upcoming_days: int = DEFAULT_UPCOMING_DAYS
) -> DashboardCounts:
    snapshot = tuple(leads)
    return DashboardCounts(
        total=len(all_leads(snapshot)),
        active=len(active_leads(snapshot)),
        due_today=len(due_today(snapshot, reference)),
        overdue=len(overdue(snapshot, reference)),
        upcoming=len(upcoming(snapshot, reference, days=upcoming_days)),
        pending_documentation=len(pending_documentation(snapshot)),
        mandate_sent=len(mandate_sent(snapshot)),
        deleted=len(deleted_leads(snapshot)),
    )
