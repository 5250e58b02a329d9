from __future__ import annotations

import secrets
import time
from datetime import UTC, datetime
from typing import Any

from pydantic import Field, field_validator

from keel.domain.sea_service.model.value import (
    RecordStatus,
    SeaServicePayload,
    SectionKey,
    SyncState,
)
from keel.domain.shared.error import IllegalTransitionError
from keel.domain.shared.model.aggregate import Aggregate


def new_record_id() -> str:
    """Stable offline-safe local id, e.g. ``ss_1734860440123_k9f3xq``."""
    return f"ss_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


def _text_or_none(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class SeaServiceRecord(Aggregate):
    id: str
    payload: SeaServicePayload = Field(default_factory=SeaServicePayload.default)
    status: RecordStatus = RecordStatus.DRAFT
    sync_state: SyncState = SyncState.DIRTY
    remote_id: str | None = None
    created_at: datetime
    updated_at: datetime

    # Listing columns, always derived from the payload
    ship_name: str | None = None
    imo_number: str | None = None
    sign_on_date: str | None = None
    sign_off_date: str | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=UTC)

    def model_post_init(self, __context: Any) -> None:
        self._derive_columns()

    @classmethod
    def new_draft(cls, now: datetime, payload: SeaServicePayload | None = None) -> SeaServiceRecord:
        stamp = _epoch_ms(now)
        base = payload or SeaServicePayload.default()
        return cls(
            id=new_record_id(),
            payload=base.model_copy(update={"last_updated_at": stamp}),
            created_at=now,
            updated_at=now,
        )

    @property
    def is_draft(self) -> bool:
        return self.status == RecordStatus.DRAFT

    @property
    def is_final(self) -> bool:
        return self.status == RecordStatus.FINAL

    def _require_draft(self) -> None:
        if self.status != RecordStatus.DRAFT:
            raise IllegalTransitionError(
                f"Sea Service {self.id} is {self.status} and can no longer be changed",
                code="RECORD_FINALIZED",
            )

    def _touch(self, now: datetime) -> int:
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        # Never step backwards, even if the wall clock does
        if now < self.updated_at:
            now = self.updated_at
        self.updated_at = now
        self.sync_state = SyncState.DIRTY
        return max(_epoch_ms(now), self.payload.last_updated_at or 0)

    def _derive_columns(self) -> None:
        general = self.payload.sections.get(SectionKey.GENERAL_IDENTITY, {})
        self.ship_name = _text_or_none(general.get("shipName"))
        self.imo_number = _text_or_none(general.get("imoNumber"))
        self.sign_on_date = _text_or_none(self.payload.service_period.sign_on_date)
        self.sign_off_date = _text_or_none(self.payload.service_period.sign_off_date)

    # -------------------------------------------------------------------------
    # Draft mutations
    # -------------------------------------------------------------------------

    def apply_section(self, key: SectionKey, data: dict[str, Any], now: datetime) -> None:
        self._require_draft()
        self.payload = self.payload.with_section(key, data, self._touch(now))
        self._derive_columns()

    def apply_service_period(self, data: dict[str, Any], now: datetime) -> None:
        self._require_draft()
        self.payload = self.payload.with_service_period(data, self._touch(now))
        self._derive_columns()

    def assign_ship_type(self, code: str | None, now: datetime) -> None:
        self._require_draft()
        self.payload = self.payload.with_ship_type(code, self._touch(now))

    def replace_payload(self, payload: SeaServicePayload, now: datetime) -> None:
        self._require_draft()
        stamp = self._touch(now)
        self.payload = payload.model_copy(update={"last_updated_at": stamp})
        self._derive_columns()

    def finalize(self, now: datetime) -> None:
        """DRAFT -> FINAL. Eligibility is checked by the lifecycle manager."""
        self._require_draft()
        self._touch(now)
        self.status = RecordStatus.FINAL


def _epoch_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp() * 1000)
