"""In-memory Sea Service state for presentation callers.

``SeaServiceSession`` hydrates from storage once, then mirrors every mutation
through the lifecycle manager, which writes it durably before the session
adopts the new payload. A refused or failed call leaves the in-memory state at
the last successfully stored version. Each call publishes a
``SeaServiceNotice`` describing its outcome.
"""

import logging
from collections.abc import Callable
from typing import Any

from keel.domain.sea_service.event import SeaServiceNotice
from keel.domain.sea_service.model.aggregate import SeaServiceRecord
from keel.domain.sea_service.model.ship_type import applicable_sections
from keel.domain.sea_service.model.value import SeaServicePayload, SectionKey, SectionStatus
from keel.domain.sea_service.service.completion import (
    SectionSummary,
    evaluate_section,
    summarize_sections,
)
from keel.domain.sea_service.service.eligibility import (
    EligibilityReport,
    assess_eligibility,
    can_finalize,
)
from keel.domain.sea_service.service.lifecycle import DraftLifecycleManager
from keel.domain.shared.error import KeelError
from keel.domain.shared.event import EventBus
from keel.infrastructure.event.memory_bus import InMemoryEventBus

logger = logging.getLogger(__name__)


class SeaServiceSession:
    def __init__(self, manager: DraftLifecycleManager, bus: EventBus | None = None) -> None:
        self._manager = manager
        self._bus = bus if bus is not None else InMemoryEventBus()
        self._hydrated = False
        self._payload = SeaServicePayload.default()
        self._active_draft_id: str | None = None
        self._history: list[SeaServiceRecord] = []
        self.last_error: KeelError | None = None

    @property
    def bus(self) -> EventBus:
        return self._bus

    # -------------------------------------------------------------------------
    # Hydration
    # -------------------------------------------------------------------------

    def activate(self) -> SeaServiceNotice:
        """Load history and the active draft. Never raises: on failure the
        session starts from the default payload and reports the error."""
        self._hydrated = False
        try:
            history = self._manager.list_history()
            draft = self._manager.get_active_draft()
        except KeelError as e:
            logger.error("Could not load Sea Service state, starting empty: %s", e.message)
            self._payload = SeaServicePayload.default()
            self._active_draft_id = None
            self._history = []
            self.last_error = e
            self._hydrated = True
            return self._notify("activate", False, e.message, code=e.code)

        self._history = list(history)
        self._active_draft_id = draft.id if draft else None
        self._payload = draft.payload if draft else SeaServicePayload.default()
        self.last_error = None
        self._hydrated = True
        logger.info(
            "Sea Service state loaded: draft=%s, history=%d",
            self._active_draft_id,
            len(self._history),
        )
        return self._notify("activate", True, "Sea Service loaded", record_id=self._active_draft_id)

    @property
    def is_hydrated(self) -> bool:
        return self._hydrated

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def payload(self) -> SeaServicePayload:
        return self._payload

    @property
    def active_draft_id(self) -> str | None:
        return self._active_draft_id

    @property
    def can_finalize(self) -> bool:
        if self._active_draft_id is None:
            return False
        return can_finalize(self._payload)

    @property
    def eligibility(self) -> EligibilityReport:
        return assess_eligibility(self._payload)

    @property
    def history(self) -> list[SeaServiceRecord]:
        return list(self._history)

    @property
    def summary(self) -> SectionSummary:
        return summarize_sections(self._payload.sections, self._payload.ship_type)

    @property
    def section_statuses(self) -> dict[SectionKey, SectionStatus]:
        return self.summary.statuses

    @property
    def applicable_sections(self) -> tuple[SectionKey, ...]:
        return applicable_sections(self._payload.ship_type)

    def section_status(self, section_key: SectionKey | str) -> SectionStatus:
        key = SectionKey(section_key)
        return evaluate_section(key, self._payload.sections.get(key), self._payload.ship_type)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def start_new_draft(self) -> SeaServiceNotice:
        def adopt(record: SeaServiceRecord) -> None:
            self._active_draft_id = record.id
            self._payload = record.payload

        return self._mutate(
            "start_new_draft",
            self._manager.start_new_draft,
            adopt,
            "New Sea Service draft started",
            needs_draft=False,
        )

    def update_section(
        self, section_key: SectionKey | str, data: dict[str, Any]
    ) -> SeaServiceNotice:
        return self._mutate(
            "update_section",
            lambda: self._manager.update_section(section_key, data),
            self._adopt_payload,
            f"{section_key} saved",
        )

    def update_service_period(self, data: dict[str, Any]) -> SeaServiceNotice:
        return self._mutate(
            "update_service_period",
            lambda: self._manager.update_service_period(data),
            self._adopt_payload,
            "Service period saved",
        )

    def set_ship_type(self, code: str | None) -> SeaServiceNotice:
        return self._mutate(
            "set_ship_type",
            lambda: self._manager.set_ship_type(code),
            self._adopt_payload,
            f"Ship type set to {code}",
        )

    def reset_draft(self) -> SeaServiceNotice:
        return self._mutate(
            "reset_draft",
            self._manager.reset_draft,
            self._adopt_payload,
            "Sea Service draft cleared",
        )

    def finalize(self) -> SeaServiceNotice:
        def adopt(record: SeaServiceRecord) -> None:
            self._active_draft_id = None
            self._payload = SeaServicePayload.default()
            self._history.insert(0, record)

        return self._mutate("finalize", self._manager.finalize, adopt, "Sea Service finalized")

    def discard_draft(self, record_id: str | None = None) -> SeaServiceNotice:
        def adopt(discarded_id: str) -> None:
            if discarded_id == self._active_draft_id:
                self._active_draft_id = None
                self._payload = SeaServicePayload.default()

        return self._mutate(
            "discard_draft",
            lambda: self._manager.discard_draft(record_id),
            adopt,
            "Sea Service draft discarded",
            needs_draft=False,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _adopt_payload(self, record: SeaServiceRecord) -> None:
        self._payload = record.payload

    def _mutate(
        self,
        operation: str,
        action: Callable[[], Any],
        adopt: Callable[[Any], None],
        success_message: str,
        *,
        needs_draft: bool = True,
    ) -> SeaServiceNotice:
        if not self._hydrated:
            return self._notify(
                operation, False, "Sea Service is still loading", code="NOT_HYDRATED"
            )
        if needs_draft and self._active_draft_id is None:
            return self._notify(
                operation, False, "Start a Sea Service before editing it", code="NO_ACTIVE_DRAFT"
            )
        try:
            result = action()
        except KeelError as e:
            self.last_error = e
            return self._notify(operation, False, e.message, code=e.code)

        adopt(result)
        self.last_error = None
        record_id = result if isinstance(result, str) else getattr(result, "id", None)
        return self._notify(operation, True, success_message, record_id=record_id)

    def _notify(
        self,
        operation: str,
        ok: bool,
        message: str,
        *,
        code: str | None = None,
        record_id: str | None = None,
    ) -> SeaServiceNotice:
        notice = SeaServiceNotice(
            operation=operation, ok=ok, message=message, code=code, record_id=record_id
        )
        if not ok:
            logger.warning("%s refused: %s (%s)", operation, message, code)
        self._bus.publish(notice)
        return notice
