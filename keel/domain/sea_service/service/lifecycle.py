import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, List

import pydantic

from keel.domain.sea_service.model.aggregate import SeaServiceRecord
from keel.domain.sea_service.model.value import SeaServicePayload, SectionKey, ServicePeriod
from keel.domain.sea_service.port.repository import SeaServiceRepository
from keel.domain.sea_service.service.eligibility import EligibilityReport, assess_eligibility
from keel.domain.shared.error import (
    EligibilityNotMetError,
    IllegalTransitionError,
    NotFoundError,
    ValidationError,
)
from keel.domain.shared.service import Service

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class DraftLifecycleManager(Service):
    """Owns the single active Sea Service draft and its DRAFT -> FINAL transition.

    State is read back from the repository on every call, so a write that
    failed never leaves a half-applied draft behind.
    """

    repository: SeaServiceRepository
    clock: Callable[[], datetime] = _utc_now

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_active_draft(self) -> SeaServiceRecord | None:
        return self.repository.get_active_draft()

    def list_history(self) -> List[SeaServiceRecord]:
        """FINAL records, most recent first."""
        return self.repository.list_final()

    def get_record(self, record_id: str) -> SeaServiceRecord:
        record = self.repository.get(record_id)
        if record is None:
            raise NotFoundError(f"Sea Service record not found: {record_id}")
        return record

    def eligibility(self) -> EligibilityReport:
        draft = self._require_active()
        return assess_eligibility(draft.payload)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start_new_draft(self) -> SeaServiceRecord:
        existing = self.repository.get_active_draft()
        if existing is not None:
            logger.warning("Refused new draft: draft %s is still active", existing.id)
            raise IllegalTransitionError(
                "Finalize or discard the current Sea Service before starting a new one",
                code="DRAFT_EXISTS",
            )
        record = SeaServiceRecord.new_draft(self.clock())
        self.repository.insert_draft(record)
        logger.info("Started Sea Service draft %s", record.id)
        return record

    def update_section(
        self, section_key: SectionKey | str, data: dict[str, Any]
    ) -> SeaServiceRecord:
        key = _parse_section_key(section_key)
        if not isinstance(data, dict):
            raise ValidationError(
                "Section data must be a mapping of field names to values", field=key
            )
        draft = self._require_active()
        draft.apply_section(key, data, self.clock())
        try:
            draft.payload.to_json()
        except (TypeError, ValueError, RecursionError) as e:
            raise ValidationError(
                f"Section {key} holds a value that cannot be stored: {e}", field=key
            ) from e
        self.repository.save_draft(draft)
        logger.debug("Saved section %s on draft %s", key, draft.id)
        return draft

    def update_service_period(self, data: dict[str, Any]) -> SeaServiceRecord:
        if not isinstance(data, dict):
            raise ValidationError("Service period must be a mapping", field="servicePeriod")
        unknown = ServicePeriod.unknown_keys(data)
        if unknown:
            raise ValidationError(
                f"Unknown service period fields: {', '.join(unknown)}", field="servicePeriod"
            )
        draft = self._require_active()
        try:
            draft.apply_service_period(data, self.clock())
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid service period: {e}", field="servicePeriod") from e
        self.repository.save_draft(draft)
        logger.debug("Saved service period on draft %s", draft.id)
        return draft

    def set_ship_type(self, code: str | None) -> SeaServiceRecord:
        if code is not None and not isinstance(code, str):
            raise ValidationError("Ship type must be a string code", field="shipType")
        draft = self._require_active()
        draft.assign_ship_type(code, self.clock())
        self.repository.save_draft(draft)
        logger.info("Ship type of draft %s set to %s", draft.id, code)
        return draft

    def reset_draft(self) -> SeaServiceRecord:
        """Clear the active draft back to the default payload, keeping its id."""
        draft = self._require_active()
        draft.replace_payload(SeaServicePayload.default(), self.clock())
        self.repository.save_draft(draft)
        logger.info("Reset draft %s", draft.id)
        return draft

    def finalize(self) -> SeaServiceRecord:
        # Re-read and re-check here: the payload may have changed since the
        # caller last looked at eligibility.
        draft = self._require_active()
        report = assess_eligibility(draft.payload)
        if not report.eligible:
            logger.warning("Refused finalization of %s: %s", draft.id, report.describe())
            raise EligibilityNotMetError(report)
        draft.finalize(self.clock())
        self.repository.mark_final(draft)
        logger.info("Finalized Sea Service %s", draft.id)
        return draft

    def discard_draft(self, record_id: str | None = None) -> str:
        """Permanently delete a DRAFT record. Returns the discarded id.

        Without an id the active draft is discarded. FINAL records are refused,
        never silently skipped.
        """
        if record_id is None:
            draft = self.repository.get_active_draft()
            if draft is None:
                raise IllegalTransitionError(
                    "There is no Sea Service draft to discard", code="NO_ACTIVE_DRAFT"
                )
        else:
            draft = self.get_record(record_id)
            if draft.is_final:
                logger.warning("Refused discard of finalized record %s", record_id)
                raise IllegalTransitionError(
                    f"Sea Service {record_id} is finalized and kept for audit, "
                    "it cannot be discarded",
                    code="RECORD_FINALIZED",
                )
        self.repository.delete_draft(draft.id)
        logger.info("Discarded Sea Service draft %s", draft.id)
        return draft.id

    def _require_active(self) -> SeaServiceRecord:
        draft = self.repository.get_active_draft()
        if draft is None:
            raise IllegalTransitionError(
                "Start a Sea Service before editing it", code="NO_ACTIVE_DRAFT"
            )
        return draft


def _parse_section_key(value: SectionKey | str) -> SectionKey:
    try:
        return SectionKey(value)
    except ValueError:
        raise ValidationError(f"Unknown Sea Service section: {value}", field="sectionKey") from None
