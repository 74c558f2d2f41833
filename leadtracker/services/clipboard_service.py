"""Plain-text rendering of leads for copy/paste."""

from __future__ import annotations

import logging
from collections.abc import Callable

from leadtracker.schemas.leads import Lead
from leadtracker.utils.dates import parse_lead_date

logger = logging.getLogger(__name__)

ClipboardWriter = Callable[[str], None]


def _display_date(value: str) -> str:
    parsed = parse_lead_date(value)
    return parsed.strftime("%d-%m-%Y") if parsed else value


def lead_fields(lead: Lead) -> list[tuple[str, str]]:
    """Labelled fields in display order; blank optional values shown as N/A."""
    rows = [
        ("Client Name", lead.client_name),
        ("Company", lead.company),
        ("Consumer Number", lead.consumer_number),
        ("KVA", lead.kva),
        ("Connection Date", _display_date(lead.connection_date)),
        ("Discom", lead.discom or ""),
        ("Address", lead.company_location),
        ("Status", lead.status.value),
        ("Unit Type", lead.unit_type.value),
        ("Follow-up Date", _display_date(lead.follow_up_date)),
        ("Last Activity", _display_date(lead.last_activity_date)),
    ]
    for position, mobile in enumerate(lead.mobile_numbers, start=1):
        label = "Main Mobile" if mobile is lead.main_mobile else f"Mobile {position}"
        value = f"{mobile.number} ({mobile.name})" if mobile.name else mobile.number
        rows.append((label, value))
    rows.append(("Notes", lead.notes))
    rows.append(("Final Conclusion", lead.final_conclusion))
    return [(label, value or "N/A") for label, value in rows]


def format_field(lead: Lead, label: str) -> str:
    for field_label, value in lead_fields(lead):
        if field_label == label:
            return value
    raise KeyError(label)


def format_lead_details(lead: Lead) -> str:
    return "\n".join(f"{label}: {value}" for label, value in lead_fields(lead))


def copy_to_clipboard(text: str, writer: ClipboardWriter) -> bool:
    """Hand ``text`` to the platform clipboard writer; failures are logged, not raised."""
    try:
        writer(text)
    except Exception:
        logger.exception("clipboard.copy_failed", extra={"event": "clipboard.copy_failed"})
        return False
    return True
