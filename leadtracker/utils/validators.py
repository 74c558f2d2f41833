"""Deterministic validators and sanitizers used by the lead form and import."""

from __future__ import annotations

import re

PHONE_PATTERN = re.compile(r"^[\d\s\-+()]+$")
_ADDRESS_SEGMENT = re.compile(r"Address:\s*(.+?)(?:\s*\||\s*$)", re.IGNORECASE)


def sanitize_text(value: str | None, max_len: int = 20000) -> str:
    """Sanitize free-form content before persistence/display."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    cleaned = cleaned[:max_len]
    return cleaned


def is_valid_phone(value: str) -> bool:
    """Digits with optional spaces, dashes, plus signs and parentheses."""
    return bool(PHONE_PATTERN.match(value.strip())) if value and value.strip() else False


def digits_only(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


def extract_address_from_notes(notes: str | None) -> tuple[str, str]:
    """Split an ``Address: ...`` segment out of free-text notes.

    Returns ``(address, remaining_notes)``. The segment runs to the next ``|``
    or the end of the text.
    """
    if not notes or "address:" not in notes.lower():
        return "", notes or ""

    match = _ADDRESS_SEGMENT.search(notes)
    if not match or not match.group(1).strip():
        return "", notes

    address = match.group(1).strip()
    remaining = _ADDRESS_SEGMENT.sub("", notes, count=1).strip()
    remaining = re.sub(r"\|\s*$", "", remaining).strip()
    remaining = re.sub(r"^\|\s*", "", remaining).strip()
    return address, remaining
