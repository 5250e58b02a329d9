"""Unit tests for SeaServiceSession."""

import pytest

from keel.application.session import SeaServiceSession
from keel.domain.sea_service.event import SeaServiceNotice
from keel.domain.sea_service.model.value import SeaServicePayload, SectionKey, SectionStatus
from keel.domain.sea_service.service.lifecycle import DraftLifecycleManager
from keel.infrastructure.event.memory_bus import InMemoryEventBus


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def notices(bus) -> list[SeaServiceNotice]:
    received: list[SeaServiceNotice] = []
    bus.subscribe(SeaServiceNotice, received.append)
    return received


@pytest.fixture
def lifecycle(memory_repository, clock) -> DraftLifecycleManager:
    return DraftLifecycleManager(repository=memory_repository, clock=clock)


@pytest.fixture
def session(lifecycle, bus) -> SeaServiceSession:
    return SeaServiceSession(lifecycle, bus)


def _fill(session: SeaServiceSession, sections, period) -> None:
    session.set_ship_type("BULK_CARRIER")
    for key, data in sections.items():
        session.update_section(key, data)
    session.update_service_period(period)


class TestActivate:
    def test_empty_store(self, session, notices):
        notice = session.activate()

        assert notice.ok is True
        assert session.is_hydrated
        assert session.active_draft_id is None
        assert session.payload == SeaServicePayload.default()
        assert session.history == []
        assert session.can_finalize is False
        assert notices == [notice]

    def test_hydrates_existing_draft_and_history(self, lifecycle, fill_draft, session):
        lifecycle.start_new_draft()
        fill_draft(lifecycle)
        final = lifecycle.finalize()
        draft = lifecycle.start_new_draft()
        lifecycle.update_section(SectionKey.GENERAL_IDENTITY, {"shipName": "MV Next"})

        session.activate()

        assert session.active_draft_id == draft.id
        assert session.payload.sections[SectionKey.GENERAL_IDENTITY] == {"shipName": "MV Next"}
        assert [r.id for r in session.history] == [final.id]

    def test_load_failure_falls_back_without_raising(self, session, memory_repository, notices):
        memory_repository.fail_reads = True

        notice = session.activate()

        assert notice.ok is False
        assert notice.code == "STORAGE_FAILURE"
        assert session.is_hydrated
        assert session.payload == SeaServicePayload.default()
        assert session.last_error is not None

    def test_mutations_before_hydration_never_write(self, session, memory_repository):
        notice = session.start_new_draft()

        assert notice.ok is False
        assert notice.code == "NOT_HYDRATED"
        assert memory_repository.write_count == 0


class TestMutations:
    def test_edits_without_a_draft_are_no_ops(self, session, memory_repository, notices):
        session.activate()

        notice = session.update_section(SectionKey.GENERAL_IDENTITY, {"shipName": "X"})

        assert notice.ok is False
        assert notice.code == "NO_ACTIVE_DRAFT"
        assert memory_repository.write_count == 0
        assert session.payload == SeaServicePayload.default()

    def test_every_mutation_is_written_immediately(self, session, lifecycle, memory_repository):
        session.activate()
        session.start_new_draft()
        writes = memory_repository.write_count

        session.update_section(SectionKey.GENERAL_IDENTITY, {"shipName": "MV Aurora"})
        session.update_service_period({"signOnPort": "Singapore"})
        session.set_ship_type("OIL_TANKER")

        assert memory_repository.write_count == writes + 3
        stored = lifecycle.get_active_draft()
        assert stored.payload == session.payload
        assert stored.payload.ship_type == "OIL_TANKER"

    def test_failed_write_keeps_last_stored_payload(self, session, memory_repository):
        session.activate()
        session.start_new_draft()
        session.update_section(SectionKey.GENERAL_IDENTITY, {"shipName": "A"})
        before = session.payload
        memory_repository.fail_writes = True

        notice = session.update_section(SectionKey.GENERAL_IDENTITY, {"shipName": "B"})

        assert notice.ok is False
        assert notice.code == "STORAGE_FAILURE"
        assert session.payload == before
        assert session.last_error.code == "STORAGE_FAILURE"

        memory_repository.fail_writes = False
        assert session.update_section(SectionKey.GENERAL_IDENTITY, {"shipName": "C"}).ok
        assert session.last_error is None

    def test_validation_errors_are_reported(self, session):
        session.activate()
        session.start_new_draft()

        notice = session.update_section("NOT_A_SECTION", {"x": 1})

        assert notice.ok is False
        assert notice.code == "VALIDATION_ERROR"

    def test_unstorable_section_value_is_reported(self, session):
        session.activate()
        session.start_new_draft()
        before = session.payload

        notice = session.update_section("CARGO_CAPABILITIES", {"holds": object()})

        assert notice.ok is False
        assert notice.code == "VALIDATION_ERROR"
        assert session.payload == before

    def test_mistyped_period_field_is_reported(self, session):
        session.activate()
        session.start_new_draft()

        notice = session.update_service_period({"signonPort": "Busan"})

        assert notice.ok is False
        assert notice.code == "VALIDATION_ERROR"
        assert session.payload.service_period.sign_on_port is None

    def test_start_twice_is_refused(self, session):
        session.activate()
        first = session.start_new_draft()
        second = session.start_new_draft()

        assert first.ok and first.record_id == session.active_draft_id
        assert second.ok is False
        assert second.code == "DRAFT_EXISTS"

    def test_reset(self, session):
        session.activate()
        session.start_new_draft()
        session.update_section(SectionKey.GENERAL_IDENTITY, {"shipName": "A"})

        assert session.reset_draft().ok
        assert session.payload.sections[SectionKey.GENERAL_IDENTITY] == {}

    def test_discard(self, session, notices):
        session.activate()
        session.start_new_draft()
        draft_id = session.active_draft_id

        notice = session.discard_draft()

        assert notice.ok and notice.record_id == draft_id
        assert session.active_draft_id is None
        assert session.payload == SeaServicePayload.default()
        assert [n.operation for n in notices] == ["activate", "start_new_draft", "discard_draft"]


class TestReadsAndFinalize:
    def test_can_finalize_is_recomputed_on_read(self, session, complete_sections, complete_period):
        session.activate()
        session.start_new_draft()
        _fill(session, complete_sections, {**complete_period, "signOffPort": ""})
        assert session.can_finalize is False
        assert session.eligibility.missing_period_fields == ["signOffPort"]

        session.update_service_period({"signOffPort": "Rotterdam"})

        assert session.can_finalize is True

    def test_finalize_moves_record_to_history(self, session, complete_sections, complete_period):
        session.activate()
        session.start_new_draft()
        draft_id = session.active_draft_id
        _fill(session, complete_sections, complete_period)

        notice = session.finalize()

        assert notice.ok
        assert session.active_draft_id is None
        assert session.can_finalize is False
        assert [r.id for r in session.history] == [draft_id]

    def test_finalize_when_ineligible(self, session):
        session.activate()
        session.start_new_draft()

        notice = session.finalize()

        assert notice.ok is False
        assert notice.code == "ELIGIBILITY_NOT_MET"
        assert session.active_draft_id is not None

    def test_section_status_and_summary(self, session, complete_sections):
        session.activate()
        session.start_new_draft()
        session.update_section(
            SectionKey.GENERAL_IDENTITY, complete_sections[SectionKey.GENERAL_IDENTITY]
        )
        session.update_section(SectionKey.CARGO_CAPABILITIES, {"cranesFitted": True})

        assert session.section_status("GENERAL_IDENTITY") == SectionStatus.COMPLETED
        assert session.section_status(SectionKey.CARGO_CAPABILITIES) == SectionStatus.IN_PROGRESS
        assert session.summary.completed == 1
        assert session.summary.in_progress == 1
        assert len(session.section_statuses) == 11
        assert session.section_statuses[SectionKey.INERT_GAS_SYSTEM] == SectionStatus.NOT_STARTED

    def test_applicable_sections_follow_ship_type(self, session):
        session.activate()
        session.start_new_draft()
        assert session.applicable_sections == ()

        session.set_ship_type("OIL_TANKER")

        assert SectionKey.INERT_GAS_SYSTEM in session.applicable_sections

    def test_history_is_a_copy(self, session):
        session.activate()
        session.history.append("x")
        assert session.history == []
