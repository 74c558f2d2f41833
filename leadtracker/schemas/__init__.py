"""Pydantic schema package for lead records and filters."""

from leadtracker.schemas.leads import (
    Activity,
    Lead,
    LeadFilters,
    LeadForm,
    MobileNumber,
    SavedView,
)

__all__ = ["Activity", "Lead", "LeadFilters", "LeadForm", "MobileNumber", "SavedView"]
