"""Spreadsheet import/export for leads.

Import reads the first sheet (or a CSV), treats row 1 as the header and maps
columns by loose keyword matching, so sheets exported by other tools still
load. Export always writes the same fixed column order.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

import pandas as pd

from leadtracker.core.enums import coerce_status
from leadtracker.schemas.leads import Activity, Lead, MobileNumber
from leadtracker.utils.dates import format_day_first, local_now, parse_lead_date, to_iso_date
from leadtracker.utils.ids import new_id
from leadtracker.utils.validators import sanitize_text

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Consumer Number",
    "KVA",
    "Connection Date",
    "Company Name",
    "Client Name",
    "Discom",
    "Mobile Number",
    "Status",
    "Notes",
    "Address",
    "Follow-up Date",
    "Mobile Number 2",
    "Contact Name 2",
    "Mobile Number 3",
    "Contact Name 3",
]

_MAIN_WITH_NAME = re.compile(r"^(?P<number>.*?)\s*\((?P<name>[^()]*)\)\s*$")
_SLOT_SUFFIX = re.compile(r"([23])\s*$")
_ZIP_MAGIC = b"PK\x03\x04"


@dataclass
class ImportResult:
    leads: list[Lead] = field(default_factory=list)
    skipped_rows: list[int] = field(default_factory=list)
    unmapped_columns: list[str] = field(default_factory=list)


def match_header(header: str) -> str | None:
    """Map a header cell to a lead field key, or ``None`` when unrecognised.

    Checks run from most to least specific: "Company Name" must land on
    company and "Contact Name 2" on a contact slot, not on the client name.
    """
    text = str(header).strip().lower()
    if not text:
        return None
    slot_match = _SLOT_SUFFIX.search(text)
    slot = slot_match.group(1) if slot_match else "1"

    if "consumer" in text:
        return "consumer_number"
    if "kva" in text:
        return "kva"
    if "connection" in text and "date" in text:
        return "connection_date"
    if "follow" in text and "date" in text:
        return "follow_up_date"
    if "discom" in text:
        return "discom"
    if "location" in text or "address" in text:
        return "company_location"
    if "notes" in text or "discussion" in text:
        return "notes"
    if "status" in text:
        return "status"
    if "mobile" in text or "phone" in text:
        return f"mobile_{slot}"
    if "contact" in text:
        return f"contact_{slot}"
    if "company" in text:
        return "company"
    if "client" in text or "name" in text:
        return "client_name"
    return None


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = sanitize_text(str(value))
    # Numeric cells read as text keep a trailing ".0".
    if re.fullmatch(r"\d+\.0", text):
        text = text[:-2]
    return text


def _split_main_number(cell: str) -> tuple[str, str | None]:
    match = _MAIN_WITH_NAME.match(cell)
    if match and match.group("number").strip():
        return match.group("number").strip(), match.group("name").strip() or None
    return cell, None


def _detect_format(source: str | Path | BinaryIO) -> str:
    """``"csv"`` or ``"xlsx"``, from the file name or, for bare buffers, the content."""
    name = source if isinstance(source, (str, Path)) else getattr(source, "name", None)
    if name:
        return "csv" if str(name).lower().endswith(".csv") else "xlsx"

    position = source.tell()
    head = source.read(len(_ZIP_MAGIC))
    source.seek(position)
    # .xlsx files are zip archives.
    return "xlsx" if isinstance(head, bytes) and head == _ZIP_MAGIC else "csv"


def _read_frame(source: str | Path | BinaryIO, file_format: str | None = None) -> pd.DataFrame:
    if (file_format or _detect_format(source)).lower() == "csv":
        return pd.read_csv(source, header=0, dtype=str, keep_default_na=False)
    return pd.read_excel(source, header=0, dtype=str, keep_default_na=False, engine="openpyxl")


def _row_to_lead(values: dict[str, str], imported_at: datetime) -> Lead:
    lead_id = new_id()
    main_number, main_name = _split_main_number(values.get("mobile_1", ""))
    main_name = values.get("contact_1") or main_name

    numbers: list[MobileNumber] = []
    if main_number:
        numbers.append(MobileNumber(id="1", number=main_number, name=main_name, is_main=True))
    for slot in ("2", "3"):
        number = values.get(f"mobile_{slot}", "")
        if number:
            numbers.append(
                MobileNumber(id=slot, number=number, name=values.get(f"contact_{slot}") or None, is_main=False)
            )

    connection = parse_lead_date(values.get("connection_date"))
    return Lead(
        id=lead_id,
        client_name=values["client_name"],
        company=values.get("company", ""),
        consumer_number=values.get("consumer_number", ""),
        kva=values.get("kva", ""),
        connection_date=format_day_first(connection) if connection else values.get("connection_date", ""),
        follow_up_date=to_iso_date(values.get("follow_up_date")) or values.get("follow_up_date", ""),
        company_location=values.get("company_location", ""),
        discom=values.get("discom") or None,
        notes=values.get("notes", ""),
        status=coerce_status(values.get("status")),
        mobile_numbers=numbers,
        last_activity_date=format_day_first(imported_at.date()),
        activities=[
            Activity(id=new_id(), lead_id=lead_id, description="Lead imported", timestamp=imported_at.isoformat())
        ],
    )


def import_leads(
    source: str | Path | BinaryIO,
    imported_at: datetime | None = None,
    file_format: str | None = None,
) -> ImportResult:
    """Read a sheet into new ``Lead`` records.

    Blank rows and rows without a client name are skipped (reported by their
    1-based sheet row number). A row that fails to convert is skipped too.
    ``file_format`` ("csv" or "xlsx") overrides detection from the name or content.
    """
    imported_at = imported_at or local_now()
    frame = _read_frame(source, file_format)

    columns: dict[str, str] = {}
    result = ImportResult()
    for header in frame.columns:
        key = match_header(header)
        if key is None:
            result.unmapped_columns.append(str(header))
        elif key not in columns:
            columns[key] = header

    for position, row in enumerate(frame.itertuples(index=False), start=2):
        raw = dict(zip(frame.columns, row))
        values = {key: _cell_text(raw[header]) for key, header in columns.items()}
        if not values.get("client_name"):
            result.skipped_rows.append(position)
            continue
        try:
            result.leads.append(_row_to_lead(values, imported_at))
        except ValueError:
            logger.warning("import.row_skipped", extra={"event": "import.row_skipped", "row": position})
            result.skipped_rows.append(position)

    logger.info(
        "import.completed",
        extra={
            "event": "import.completed",
            "imported": len(result.leads),
            "skipped": len(result.skipped_rows),
        },
    )
    return result


def _export_row(lead: Lead) -> dict[str, str]:
    main = lead.main_mobile
    main_cell = ""
    if main is not None:
        main_cell = f"{main.number} ({main.name})" if main.name else main.number
    others = [mobile for mobile in lead.mobile_numbers if mobile is not main]
    others += [MobileNumber(id="", number="")] * (2 - len(others))

    return {
        "Consumer Number": lead.consumer_number,
        "KVA": lead.kva,
        "Connection Date": lead.connection_date,
        "Company Name": lead.company,
        "Client Name": lead.client_name,
        "Discom": lead.discom or "",
        "Mobile Number": main_cell,
        "Status": lead.status.value,
        "Notes": lead.notes,
        "Address": lead.company_location,
        "Follow-up Date": lead.follow_up_date,
        "Mobile Number 2": others[0].number,
        "Contact Name 2": others[0].name or "",
        "Mobile Number 3": others[1].number,
        "Contact Name 3": others[1].name or "",
    }


def leads_to_frame(leads: list[Lead]) -> pd.DataFrame:
    return pd.DataFrame([_export_row(lead) for lead in leads], columns=EXPORT_COLUMNS)


def export_leads(leads: list[Lead], destination: str | Path | BinaryIO | None = None) -> io.BytesIO | None:
    """Write leads as an ``.xlsx`` workbook.

    With no destination the workbook is returned in a rewound ``BytesIO``.
    """
    frame = leads_to_frame(leads)
    output = destination if destination is not None else io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name="Leads")

    logger.info("export.completed", extra={"event": "export.completed", "rows": len(frame)})
    if destination is None:
        output.seek(0)
        return output
    return None
