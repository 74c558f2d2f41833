from __future__ import annotations

import pytest

from leadtracker.schemas.leads import MobileNumber
from leadtracker.services.clipboard_service import copy_to_clipboard, format_field, format_lead_details


def test_format_lead_details_lists_every_field(make_lead):
    lead = make_lead(
        client_name="Meena Shah",
        follow_up_date="2025-03-07",
        mobile_numbers=[
            MobileNumber(id="1", number="98765 43210", name="Meena", is_main=True),
            MobileNumber(id="2", number="91234 56789"),
        ],
    )
    text = format_lead_details(lead)

    assert "Client Name: Meena Shah" in text
    assert "Follow-up Date: 07-03-2025" in text
    assert "Main Mobile: 98765 43210 (Meena)" in text
    assert "Mobile 2: 91234 56789" in text
    assert "Discom: N/A" in text


def test_format_field(make_lead):
    lead = make_lead(company="Orbit Steel")
    assert format_field(lead, "Company") == "Orbit Steel"
    with pytest.raises(KeyError):
        format_field(lead, "Fax")


def test_copy_to_clipboard_reports_failure_without_raising():
    copied = []
    assert copy_to_clipboard("hello", copied.append) is True
    assert copied == ["hello"]

    def broken_writer(text):
        raise OSError("clipboard unavailable")

    assert copy_to_clipboard("hello", broken_writer) is False
