"""Enums for the lead tracker.

Status values use the title-case labels shown to users, so the enum value is
also the persisted value.
"""

from enum import Enum


class LeadStatus(str, Enum):
    """Workflow stage of a lead."""

    NEW = "New"
    CNR = "CNR"
    BUSY = "Busy"
    FOLLOW_UP = "Follow-up"
    DEAL_CLOSE = "Deal Close"
    WORK_ALLOTED = "Work Alloted"
    HOTLEAD = "Hotlead"
    MANDATE_SENT = "Mandate Sent"
    DOCUMENTATION = "Documentation"


# Labels from the earlier status set, mapped onto the current one.
LEGACY_STATUS_MAP = {
    "Contacted": LeadStatus.FOLLOW_UP,
    "In Progress": LeadStatus.HOTLEAD,
    "Closed - Won": LeadStatus.DEAL_CLOSE,
    "Closed-Won": LeadStatus.DEAL_CLOSE,
    "Closed - Lost": LeadStatus.CNR,
    "Closed-Lost": LeadStatus.CNR,
}


class UnitType(str, Enum):
    NEW = "New"
    EXISTING = "Existing"
    OTHER = "Other"


class MandateStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class DocumentStatus(str, Enum):
    PENDING_DOCUMENTS = "Pending Documents"
    DOCUMENTS_SUBMITTED = "Documents Submitted"
    DOCUMENTS_REVIEWED = "Documents Reviewed"
    SIGNED_MANDATE = "Signed Mandate"


class LifecycleState(str, Enum):
    """Deletion lifecycle of a lead."""

    ACTIVE = "active"
    SOFT_DELETED = "soft_deleted"
    PERMANENTLY_REMOVED = "permanently_removed"


def coerce_status(value: str | None, default: LeadStatus = LeadStatus.NEW) -> LeadStatus:
    """Resolve a current or legacy status label, case-insensitively."""
    if isinstance(value, LeadStatus):
        return value
    if value is None:
        return default
    label = str(value).strip()
    if not label:
        return default
    lowered = label.lower()
    for status in LeadStatus:
        if status.value.lower() == lowered:
            return status
    for legacy, status in LEGACY_STATUS_MAP.items():
        if legacy.lower() == lowered:
            return status
    return default


# Storage keys shared by the store and the deletion gate
LEADS_KEY = "leads"
SAVED_VIEWS_KEY = "savedViews"
PASSWORD_KEY = "deletePassword"
