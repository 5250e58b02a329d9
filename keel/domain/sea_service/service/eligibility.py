"""Finalization eligibility.

A Sea Service may be finalized only when the service period is complete
(sign-on AND sign-off, each with a valid date and a port) and every one of the
fixed sections is COMPLETED. Sections that the wizard hides for the ship type
still count, so they must carry a value such as a "not fitted" note.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any

from pydantic import BaseModel

from keel.domain.sea_service.model.value import (
    SeaServicePayload,
    SectionKey,
    SectionStatus,
    ServicePeriod,
)
from keel.domain.sea_service.service.completion import evaluate_section, missing_fields


_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def is_valid_date_value(value: Any) -> bool:
    """ISO ``YYYY-MM-DD`` strings that name a real calendar day, or ``date`` objects."""
    if isinstance(value, date):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip()
    if not _ISO_DATE.fullmatch(text):
        return False
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_service_period_complete(period: ServicePeriod | None) -> bool:
    if period is None:
        return False
    return (
        is_valid_date_value(period.sign_on_date)
        and _has_text(period.sign_on_port)
        and is_valid_date_value(period.sign_off_date)
        and _has_text(period.sign_off_port)
    )


def missing_period_fields(period: ServicePeriod | None) -> list[str]:
    period = period or ServicePeriod()
    missing = []
    if not is_valid_date_value(period.sign_on_date):
        missing.append("signOnDate")
    if not _has_text(period.sign_on_port):
        missing.append("signOnPort")
    if not is_valid_date_value(period.sign_off_date):
        missing.append("signOffDate")
    if not _has_text(period.sign_off_port):
        missing.append("signOffPort")
    return missing


def can_finalize(payload: SeaServicePayload | None, ship_type: str | None = None) -> bool:
    if payload is None:
        return False
    if not is_service_period_complete(payload.service_period):
        return False
    ship_type = ship_type if ship_type is not None else payload.ship_type
    return all(
        evaluate_section(key, payload.sections.get(key), ship_type) == SectionStatus.COMPLETED
        for key in SectionKey
    )


class EligibilityReport(BaseModel):
    """Which finalization gates failed, with enough detail for a useful message."""

    service_period_complete: bool
    missing_period_fields: list[str] = []
    incomplete_sections: dict[SectionKey, SectionStatus] = {}
    missing_fields: dict[SectionKey, list[str]] = {}

    @property
    def eligible(self) -> bool:
        return self.service_period_complete and not self.incomplete_sections

    def describe(self) -> str:
        if self.eligible:
            return "Sea Service is ready to finalize"
        parts = []
        if not self.service_period_complete:
            parts.append(
                "service period incomplete (" + ", ".join(self.missing_period_fields) + ")"
            )
        if self.incomplete_sections:
            parts.append(
                "sections not completed: "
                + ", ".join(str(key) for key in self.incomplete_sections)
            )
        return "Cannot finalize Sea Service: " + "; ".join(parts)


def assess_eligibility(
    payload: SeaServicePayload, ship_type: str | None = None
) -> EligibilityReport:
    ship_type = ship_type if ship_type is not None else payload.ship_type
    incomplete: dict[SectionKey, SectionStatus] = {}
    missing: dict[SectionKey, list[str]] = {}
    for key in SectionKey:
        data = payload.sections.get(key)
        status = evaluate_section(key, data, ship_type)
        if status != SectionStatus.COMPLETED:
            incomplete[key] = status
            missing[key] = missing_fields(key, data, ship_type)
    return EligibilityReport(
        service_period_complete=is_service_period_complete(payload.service_period),
        missing_period_fields=missing_period_fields(payload.service_period),
        incomplete_sections=incomplete,
        missing_fields=missing,
    )
