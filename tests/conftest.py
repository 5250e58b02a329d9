"""Global test fixtures."""

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from keel.config import DatabaseConfig
from keel.domain.sea_service.model.aggregate import SeaServiceRecord
from keel.domain.sea_service.model.value import RecordStatus, SectionKey
from keel.domain.sea_service.service.lifecycle import DraftLifecycleManager
from keel.domain.shared.error import IllegalTransitionError, NotFoundError, StorageFailureError
from keel.infrastructure.persistence.database import Database
from keel.infrastructure.persistence.repository.sea_service import SqlSeaServiceRepository


class FakeClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class InMemorySeaServiceRepository:
    """Dict-backed repository with the same refusal rules as the SQL one.

    Records are copied in and out, so callers never share state with storage.
    Set ``fail_reads`` / ``fail_writes`` to simulate an unavailable store.
    """

    def __init__(self) -> None:
        self.rows: dict[str, SeaServiceRecord] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.write_count = 0

    def _read(self) -> None:
        if self.fail_reads:
            raise StorageFailureError("disk unavailable")

    def _write(self) -> None:
        if self.fail_writes:
            raise StorageFailureError("disk full")
        self.write_count += 1

    def _stored_draft(self, record_id: str) -> SeaServiceRecord:
        stored = self.rows.get(record_id)
        if stored is None:
            raise NotFoundError(f"Sea Service record not found: {record_id}")
        if stored.status != RecordStatus.DRAFT:
            raise IllegalTransitionError("finalized", code="RECORD_FINALIZED")
        return stored

    def get(self, record_id: str) -> SeaServiceRecord | None:
        self._read()
        record = self.rows.get(record_id)
        return record.model_copy(deep=True) if record else None

    def get_active_draft(self) -> SeaServiceRecord | None:
        self._read()
        for record in self.rows.values():
            if record.status == RecordStatus.DRAFT:
                return record.model_copy(deep=True)
        return None

    def list_final(self) -> list[SeaServiceRecord]:
        self._read()
        finals = [r for r in self.rows.values() if r.status == RecordStatus.FINAL]
        finals.sort(key=lambda r: (r.updated_at, r.created_at), reverse=True)
        return [r.model_copy(deep=True) for r in finals]

    def insert_draft(self, record: SeaServiceRecord) -> None:
        self._write()
        if any(r.status == RecordStatus.DRAFT for r in self.rows.values()):
            raise StorageFailureError("UNIQUE constraint failed: sea_service_records.status")
        self.rows[record.id] = record.model_copy(deep=True)

    def save_draft(self, record: SeaServiceRecord) -> None:
        self._write()
        self._stored_draft(record.id)
        self.rows[record.id] = record.model_copy(deep=True)

    def mark_final(self, record: SeaServiceRecord) -> None:
        self._write()
        self._stored_draft(record.id)
        self.rows[record.id] = record.model_copy(deep=True)

    def delete_draft(self, record_id: str) -> None:
        self._write()
        self._stored_draft(record_id)
        del self.rows[record_id]


def _complete_sections() -> dict[SectionKey, dict[str, Any]]:
    """Every section COMPLETED for a non-tanker (bulk carrier)."""
    return {
        SectionKey.GENERAL_IDENTITY: {
            "shipName": "MV Aurora",
            "imoNumber": "9876543",
            "flagState": "Panama",
            "portOfRegistry": "Panama City",
        },
        SectionKey.DIMENSIONS_TONNAGE: {
            "grossTonnage": 32000,
            "netTonnage": 18000,
            "deadweightTonnage": 56000,
            "loaMeters": 190,
            "breadthMeters": 32.2,
            "summerDraftMeters": 12.5,
        },
        SectionKey.PROPULSION_PERFORMANCE: {
            "mainEngineMakeModel": "MAN B&W 6S50MC-C",
            "mainEngineType": "2-stroke",
            "numberOfMainEngines": 1,
            "mcrPower": "9480 kW",
            "rpmAtMcr": 127,
            "serviceSpeedKnots": 14,
            "dailyFuelConsumption": "28 t",
            "fuelTypes": ["VLSFO", "MGO"],
            "numberOfPropellers": 1,
            "propellerType": "FPP",
            "rudderType": "Semi-balanced",
        },
        SectionKey.AUX_MACHINERY_ELECTRICAL: {
            "mainGeneratorsMakeModel": "Yanmar 6EY18",
            "numberOfGenerators": 3,
            "generatorPowerOutput": "3 x 600 kW",
            "emergencyGeneratorMakeModel": "Cummins",
            "emergencyGeneratorPowerOutput": "150 kW",
            "mainSupplyVoltageFrequency": "440 V / 60 Hz",
            "lightingSupplyVoltage": "220 V",
            "boilerMakeType": "Aalborg composite",
            "boilerWorkingPressure": "7 bar",
            "airCompressorsMakePressure": "Tanabe 30 bar",
            "purifiersMake": "Alfa Laval",
            "freshWaterGeneratorType": "Vacuum evaporator",
            "oilyWaterSeparatorMakeModel": "RWO SKIT/S",
            "sewageTreatmentPlantMakeModel": "Hamworthy ST",
            "incineratorMake": "Atlas",
        },
        SectionKey.DECK_MACHINERY_MANEUVERING: {
            "anchorWindlassMakeType": "Hydraulic",
            "anchorPortTypeWeight": "Hall 7.5 t",
            "anchorStarboardTypeWeight": "Hall 7.5 t",
            "chainLengthPortShackles": 12,
            "chainLengthStarboardShackles": 12,
            "mooringWinchesNumberType": "4 x hydraulic",
            "steeringGearMakeModelType": "Rapson slide",
            "bowThrusterFitted": False,
        },
        SectionKey.CARGO_CAPABILITIES: {
            "cargoHoldsCount": 5,
            "cranesFitted": True,
            "cranesSwl": "4 x 30 t",
        },
        SectionKey.NAVIGATION_COMMUNICATION: {
            "radarCount": 2,
            "gyroCompassMakeModel": "Sperry",
            "aisMakeModel": "JRC JHS-183",
            "echoSounderMakeModel": "Furuno FE-800",
            "magneticCompassFitted": True,
            "ecdisFitted": True,
            "ecdisMakeModel": "Transas",
            "gmdssSeaArea": "A3",
            "vhfDscCount": 2,
        },
        SectionKey.LIFE_SAVING_APPLIANCES: {
            "lifeboatType": "Free-fall",
            "lifeboatCount": 1,
            "lifeboatCapacity": 25,
            "epirbType": "406 MHz",
            "sartType": "Radar SART",
        },
        SectionKey.FIRE_FIGHTING_APPLIANCES: {
            "engineRoomFixedSystemType": "CO2",
            "firePumpsCount": 2,
            "emergencyFirePumpType": "Diesel driven",
            "portableExtinguishersAvailable": True,
            "breathingApparatusCount": 4,
            "firemanOutfitsCount": 2,
        },
        SectionKey.POLLUTION_PREVENTION: {
            "annex1_owsFitted": True,
            "annex1_ppm15AlarmFitted": True,
            "annex1_oilRecordBookPartI": True,
            "annex1_sopepSmpepOnboard": True,
            "annex4_stpFitted": True,
            "annex5_garbageManagementPlan": True,
            "annex5_garbageRecordBook": True,
            "annex6_iappCertificate": True,
            "annex6_fuelSulfurComplianceMethod": "VLSFO",
            "annex6_egcsFitted": False,
        },
        SectionKey.INERT_GAS_SYSTEM: {
            "igsFitted": False,
            "igsNotFittedReason": "Dry bulk carrier",
        },
    }


@pytest.fixture
def complete_sections() -> dict[SectionKey, dict[str, Any]]:
    return _complete_sections()


@pytest.fixture
def complete_period() -> dict[str, str]:
    return {
        "signOnDate": "2024-03-01",
        "signOnPort": "Singapore",
        "signOffDate": "2024-09-15",
        "signOffPort": "Rotterdam",
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_repository() -> InMemorySeaServiceRepository:
    return InMemorySeaServiceRepository()


@pytest.fixture
def database():
    """Started in-memory SQLite database, schema applied."""
    db = Database(DatabaseConfig(url="sqlite://"))
    db.start()
    yield db
    db.stop()


@pytest.fixture
def repository(database: Database) -> SqlSeaServiceRepository:
    return SqlSeaServiceRepository(database.engine)


@pytest.fixture
def manager(repository: SqlSeaServiceRepository, clock: FakeClock) -> DraftLifecycleManager:
    return DraftLifecycleManager(repository=repository, clock=clock)


@pytest.fixture
def fill_draft(complete_sections, complete_period):
    """Fill the active draft of a manager so that it is eligible to finalize."""

    def _fill(manager: DraftLifecycleManager, *, period: bool = True) -> None:
        manager.set_ship_type("BULK_CARRIER")
        for key, data in complete_sections.items():
            manager.update_section(key, data)
        if period:
            manager.update_service_period(complete_period)

    return _fill
