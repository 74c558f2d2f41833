"""Lead record schemas and their persisted JSON shape."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from leadtracker.core.enums import (
    DocumentStatus,
    LeadStatus,
    MandateStatus,
    UnitType,
    coerce_status,
)

_TEXT_FIELDS = (
    "kva",
    "connection_date",
    "consumer_number",
    "company",
    "client_name",
    "company_location",
    "last_activity_date",
    "follow_up_date",
    "final_conclusion",
    "notes",
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class MobileNumber(_CamelModel):
    id: str
    number: str = ""
    name: str | None = None
    is_main: bool = False

    @field_validator("number", mode="before")
    @classmethod
    def _number_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class Activity(_CamelModel):
    id: str
    lead_id: str
    description: str
    timestamp: str


def normalize_main_flag(numbers: list[MobileNumber]) -> list[MobileNumber]:
    """Keep the first ``is_main`` entry as the only main number."""
    seen_main = False
    normalized: list[MobileNumber] = []
    for mobile in numbers:
        if mobile.is_main and seen_main:
            mobile = mobile.model_copy(update={"is_main": False})
        seen_main = seen_main or mobile.is_main
        normalized.append(mobile)
    return normalized


def _migrate_legacy_fields(data: Any) -> Any:
    """Fold the flat ``mobileNumber`` key into the list, map legacy statuses
    and let stored nulls fall back to field defaults.
    """
    if not isinstance(data, dict):
        return data
    payload = dict(data)
    legacy_number = payload.pop("mobileNumber", None)
    legacy_number = payload.pop("mobile_number", legacy_number)

    for list_key in ("mobileNumbers", "mobile_numbers", "activities"):
        if list_key in payload and payload[list_key] is None:
            payload[list_key] = []
    for key in ("unitType", "unit_type", "status"):
        if key in payload and payload[key] is None:
            del payload[key]

    numbers_key = "mobileNumbers" if "mobileNumbers" in payload else "mobile_numbers"
    if not payload.get(numbers_key) and legacy_number:
        payload[numbers_key] = [{"id": "1", "number": str(legacy_number), "isMain": True}]

    status = payload.get("status")
    if isinstance(status, str):
        payload["status"] = coerce_status(status)
    return payload


class Lead(_CamelModel):
    """A prospective client tracked through the sales and documentation pipeline."""

    id: str
    kva: str = ""
    connection_date: str = ""
    consumer_number: str = ""
    company: str = ""
    client_name: str = ""
    mobile_numbers: list[MobileNumber] = Field(default_factory=list)
    company_location: str = ""
    discom: str | None = None
    unit_type: UnitType = UnitType.NEW
    status: LeadStatus = LeadStatus.NEW
    mandate_status: MandateStatus | None = None
    document_status: DocumentStatus | None = None
    last_activity_date: str = ""
    follow_up_date: str = ""
    final_conclusion: str = ""
    notes: str = ""
    is_done: bool = False
    is_deleted: bool = False
    activities: list[Activity] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_shape(cls, data: Any) -> Any:
        return _migrate_legacy_fields(data)

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _none_as_blank(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("is_done", "is_deleted", mode="before")
    @classmethod
    def _none_as_false(cls, value: Any) -> bool:
        return False if value is None else value

    @field_validator("mobile_numbers", mode="after")
    @classmethod
    def _single_main_number(cls, value: list[MobileNumber]) -> list[MobileNumber]:
        return normalize_main_flag(value)

    @property
    def main_mobile(self) -> MobileNumber | None:
        for mobile in self.mobile_numbers:
            if mobile.is_main:
                return mobile
        return self.mobile_numbers[0] if self.mobile_numbers else None

    @property
    def main_number(self) -> str:
        mobile = self.main_mobile
        return mobile.number if mobile is not None else ""

    @property
    def phone_numbers(self) -> list[str]:
        return [mobile.number for mobile in self.mobile_numbers if mobile.number]

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict in the persisted shape, flat ``mobileNumber`` included."""
        record = self.model_dump(mode="json", by_alias=True)
        record["mobileNumber"] = self.main_number
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Lead":
        return cls.model_validate(record)


class LeadFilters(_CamelModel):
    """Filter criteria; every populated field must hold (AND).

    ``is_deleted``/``is_done`` select a state; ``None`` accepts either.
    """

    status: list[LeadStatus] | None = None
    follow_up_date_start: str | None = None
    follow_up_date_end: str | None = None
    search_term: str | None = None
    is_deleted: bool | None = False
    is_done: bool | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _legacy_status_labels(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set)):
            return [coerce_status(item) if isinstance(item, str) else item for item in value]
        return value


class SavedView(_CamelModel):
    id: str
    name: str = Field(min_length=1, max_length=120)
    filters: LeadFilters = Field(default_factory=LeadFilters)


class LeadForm(BaseModel):
    """Values submitted from the add/edit lead form, before validation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    kva: str = ""
    connection_date: str = ""
    consumer_number: str = ""
    company: str = ""
    client_name: str = ""
    mobile_numbers: list[MobileNumber] = Field(default_factory=list)
    company_location: str = ""
    discom: str | None = None
    unit_type: UnitType = UnitType.NEW
    status: LeadStatus = LeadStatus.NEW
    # Accepted for form symmetry only; submission always restamps it.
    last_activity_date: str = ""
    follow_up_date: str = ""
    final_conclusion: str = ""
    notes: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _legacy_status(cls, value: Any) -> Any:
        return coerce_status(value) if isinstance(value, str) else value
