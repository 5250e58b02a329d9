from __future__ import annotations

import json
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RecordStatus(StrEnum):
    DRAFT = "DRAFT"
    FINAL = "FINAL"


class SyncState(StrEnum):
    """Remote sync placeholder. Only LOCAL_ONLY and DIRTY are set locally."""

    LOCAL_ONLY = "LOCAL_ONLY"
    DIRTY = "DIRTY"
    SYNCING = "SYNCING"
    SYNCED = "SYNCED"
    CONFLICT = "CONFLICT"


class SectionKey(StrEnum):
    """The fixed, ordered set of Sea Service sections."""

    GENERAL_IDENTITY = "GENERAL_IDENTITY"
    DIMENSIONS_TONNAGE = "DIMENSIONS_TONNAGE"
    PROPULSION_PERFORMANCE = "PROPULSION_PERFORMANCE"
    AUX_MACHINERY_ELECTRICAL = "AUX_MACHINERY_ELECTRICAL"
    DECK_MACHINERY_MANEUVERING = "DECK_MACHINERY_MANEUVERING"
    CARGO_CAPABILITIES = "CARGO_CAPABILITIES"
    NAVIGATION_COMMUNICATION = "NAVIGATION_COMMUNICATION"
    LIFE_SAVING_APPLIANCES = "LIFE_SAVING_APPLIANCES"
    FIRE_FIGHTING_APPLIANCES = "FIRE_FIGHTING_APPLIANCES"
    POLLUTION_PREVENTION = "POLLUTION_PREVENTION"
    INERT_GAS_SYSTEM = "INERT_GAS_SYSTEM"


class SectionStatus(StrEnum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


def _empty_sections() -> dict[SectionKey, dict[str, Any]]:
    return {key: {} for key in SectionKey}


class ServicePeriod(BaseModel):
    """Sign-on / sign-off dates and ports.

    Dates are kept as ISO ``YYYY-MM-DD`` strings; ``date`` inputs are converted.
    Whether they are valid calendar dates is decided by the period validator,
    not here, so partially typed input can still be saved.
    """

    model_config = ConfigDict(populate_by_name=True)

    sign_on_date: str | None = Field(default=None, alias="signOnDate")
    sign_on_port: str | None = Field(default=None, alias="signOnPort")
    sign_off_date: str | None = Field(default=None, alias="signOffDate")
    sign_off_port: str | None = Field(default=None, alias="signOffPort")

    @field_validator("sign_on_date", "sign_off_date", mode="before")
    @classmethod
    def _date_to_iso(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        return value

    @classmethod
    def unknown_keys(cls, data: dict[str, Any]) -> list[str]:
        """Keys of ``data`` that are neither a field name nor its alias."""
        known = set(cls.model_fields) | {f.alias for f in cls.model_fields.values() if f.alias}
        return [name for name in data if name not in known]

    def merged(self, data: dict[str, Any]) -> ServicePeriod:
        """Shallow merge: provided fields overwrite, the rest are kept."""
        current = self.model_dump(by_alias=True)
        for name, value in data.items():
            field = ServicePeriod.model_fields.get(name)
            current[field.alias if field and field.alias else name] = value
        return ServicePeriod.model_validate(current)


class SeaServicePayload(BaseModel):
    """The full content of a Sea Service record.

    ``sections`` always carries exactly the fixed section keys, even for
    sections that do not apply to the selected ship type.
    """

    model_config = ConfigDict(populate_by_name=True)

    ship_type: str | None = Field(default=None, alias="shipType")
    service_period: ServicePeriod = Field(default_factory=ServicePeriod, alias="servicePeriod")
    sections: dict[SectionKey, dict[str, Any]] = Field(default_factory=_empty_sections)
    last_updated_at: int | None = Field(default=None, alias="lastUpdatedAt")

    @field_validator("sections", mode="before")
    @classmethod
    def _fixed_section_keys(cls, value: Any) -> dict[SectionKey, dict[str, Any]]:
        if not isinstance(value, dict):
            return _empty_sections()
        sections: dict[SectionKey, dict[str, Any]] = {}
        for key in SectionKey:
            data = value.get(key)
            sections[key] = dict(data) if isinstance(data, dict) else {}
        return sections

    @model_validator(mode="before")
    @classmethod
    def _null_period(cls, data: Any) -> Any:
        if isinstance(data, dict):
            for name in ("servicePeriod", "service_period"):
                if name in data and data[name] is None:
                    data = {**data, name: {}}
        return data

    @classmethod
    def default(cls) -> SeaServicePayload:
        return cls()

    # -------------------------------------------------------------------------
    # Copy-on-write updates
    # -------------------------------------------------------------------------

    def with_section(self, key: SectionKey, data: dict[str, Any], stamp: int) -> SeaServicePayload:
        sections = {k: dict(v) for k, v in self.sections.items()}
        sections[key] = {**sections[key], **data}
        return self.model_copy(update={"sections": sections, "last_updated_at": stamp})

    def with_service_period(self, data: dict[str, Any], stamp: int) -> SeaServicePayload:
        return self.model_copy(
            update={
                "service_period": self.service_period.merged(data),
                "last_updated_at": stamp,
            }
        )

    def with_ship_type(self, code: str | None, stamp: int) -> SeaServicePayload:
        return self.model_copy(update={"ship_type": code, "last_updated_at": stamp})

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, blob: str) -> SeaServicePayload:
        """Parse a serialized payload. Raises on malformed input."""
        return cls.model_validate(json.loads(blob))
