"""Section completion rules.

Each section is classified as NOT_STARTED, IN_PROGRESS or COMPLETED:

- NOT_STARTED when no field holds a meaningful value.
- COMPLETED when the section's rule in ``SECTION_RULES`` holds.
- IN_PROGRESS otherwise.

Large sections complete on a safety-relevant subset of their fields rather
than on every optional field. Rules are plain values composed from the
building blocks below, so each one can be tested on its own.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

from pydantic import BaseModel

from keel.domain.sea_service.model.ship_type import is_chemical_tanker, is_tanker
from keel.domain.sea_service.model.value import SectionKey, SectionStatus

Fields = Mapping[str, Any]


def is_meaningful(value: Any) -> bool:
    """Whether a field holds real input. ``False``, blanks and ``None`` do not."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    if isinstance(value, date):
        return True
    return False


class SectionRule(Protocol):
    def missing(self, fields: Fields, ship_type: str | None) -> list[str]: ...


def is_complete(rule: SectionRule, fields: Fields, ship_type: str | None = None) -> bool:
    return not rule.missing(fields, ship_type)


# =============================================================================
# Rule building blocks
# =============================================================================


@dataclass(frozen=True)
class RequiredFields:
    """Every named field holds a meaningful value."""

    names: tuple[str, ...]

    def __init__(self, *names: str) -> None:
        object.__setattr__(self, "names", names)

    def missing(self, fields: Fields, ship_type: str | None) -> list[str]:
        return [name for name in self.names if not is_meaningful(fields.get(name))]


@dataclass(frozen=True)
class Answered:
    """Every named yes/no field was explicitly answered. ``False`` counts."""

    names: tuple[str, ...]

    def __init__(self, *names: str) -> None:
        object.__setattr__(self, "names", names)

    def missing(self, fields: Fields, ship_type: str | None) -> list[str]:
        return [name for name in self.names if not isinstance(fields.get(name), bool)]


@dataclass(frozen=True)
class IsTrue:
    """The named flag is set to ``True`` (equipment present)."""

    name: str

    def missing(self, fields: Fields, ship_type: str | None) -> list[str]:
        return [] if fields.get(self.name) is True else [self.name]


@dataclass(frozen=True)
class AllOf:
    rules: tuple[SectionRule, ...]

    def __init__(self, *rules: SectionRule) -> None:
        object.__setattr__(self, "rules", rules)

    def missing(self, fields: Fields, ship_type: str | None) -> list[str]:
        result: list[str] = []
        for rule in self.rules:
            for name in rule.missing(fields, ship_type):
                if name not in result:
                    result.append(name)
        return result


@dataclass(frozen=True)
class AnyOf:
    """At least one alternative holds. Reports the closest alternative when none does."""

    rules: tuple[SectionRule, ...]

    def __init__(self, *rules: SectionRule) -> None:
        object.__setattr__(self, "rules", rules)

    def missing(self, fields: Fields, ship_type: str | None) -> list[str]:
        candidates = [rule.missing(fields, ship_type) for rule in self.rules]
        return min(candidates, key=len) if candidates else []


@dataclass(frozen=True)
class WhenTrue:
    """Applies ``rule`` only while ``flag`` is ``True``."""

    flag: str
    rule: SectionRule

    def missing(self, fields: Fields, ship_type: str | None) -> list[str]:
        if fields.get(self.flag) is True:
            return self.rule.missing(fields, ship_type)
        return []


@dataclass(frozen=True)
class ForShipTypes:
    """Applies ``rule`` only to ship types matching ``applies``."""

    applies: Callable[[str | None], bool]
    rule: SectionRule

    def missing(self, fields: Fields, ship_type: str | None) -> list[str]:
        if self.applies(ship_type):
            return self.rule.missing(fields, ship_type)
        return []


NO_DETAILS = "(no details entered)"


@dataclass(frozen=True)
class FilledEntries:
    """Every non-boolean entry present is filled in, and there is at least one.

    Sections made only of yes/no answers never complete under this rule.
    """

    def missing(self, fields: Fields, ship_type: str | None) -> list[str]:
        entries = {k: v for k, v in fields.items() if not isinstance(v, bool)}
        if not entries:
            return [NO_DETAILS]
        return [k for k, v in entries.items() if not is_meaningful(v)]


@dataclass(frozen=True)
class InertGasRule:
    """Inert gas system.

    Not fitted: complete with a written reason, but only for non-tankers.
    Fitted: core components and monitoring must be answered, plus the blower
    count and deck seal type whenever those components are present.
    """

    fitted: SectionRule = AllOf(
        RequiredFields("igsSourceType"),
        Answered("scrubberAvailable", "blowerAvailable", "deckSealAvailable"),
        Answered("oxygenAnalyzerAvailable", "igPressureAlarmAvailable"),
        WhenTrue("blowerAvailable", RequiredFields("blowerCount")),
        WhenTrue("deckSealAvailable", RequiredFields("deckSealType")),
    )

    def missing(self, fields: Fields, ship_type: str | None) -> list[str]:
        fitted = fields.get("igsFitted")
        if fitted is True:
            return self.fitted.missing(fields, ship_type)
        if fitted is False:
            if is_tanker(ship_type):
                return ["igsFitted"]
            return RequiredFields("igsNotFittedReason").missing(fields, ship_type)
        return ["igsFitted"]


# =============================================================================
# Registry
# =============================================================================

SECTION_RULES: dict[SectionKey, SectionRule] = {
    SectionKey.GENERAL_IDENTITY: RequiredFields(
        "shipName", "imoNumber", "flagState", "portOfRegistry"
    ),
    SectionKey.DIMENSIONS_TONNAGE: RequiredFields(
        "grossTonnage",
        "netTonnage",
        "deadweightTonnage",
        "loaMeters",
        "breadthMeters",
        "summerDraftMeters",
    ),
    SectionKey.PROPULSION_PERFORMANCE: RequiredFields(
        "mainEngineMakeModel",
        "mainEngineType",
        "numberOfMainEngines",
        "mcrPower",
        "rpmAtMcr",
        "serviceSpeedKnots",
        "dailyFuelConsumption",
        "fuelTypes",
        "numberOfPropellers",
        "propellerType",
        "rudderType",
    ),
    SectionKey.AUX_MACHINERY_ELECTRICAL: RequiredFields(
        "mainGeneratorsMakeModel",
        "numberOfGenerators",
        "generatorPowerOutput",
        "emergencyGeneratorMakeModel",
        "emergencyGeneratorPowerOutput",
        "mainSupplyVoltageFrequency",
        "lightingSupplyVoltage",
        "boilerMakeType",
        "boilerWorkingPressure",
        "airCompressorsMakePressure",
        "purifiersMake",
        "freshWaterGeneratorType",
        "oilyWaterSeparatorMakeModel",
        "sewageTreatmentPlantMakeModel",
        "incineratorMake",
    ),
    SectionKey.DECK_MACHINERY_MANEUVERING: AllOf(
        RequiredFields(
            "anchorWindlassMakeType",
            "anchorPortTypeWeight",
            "anchorStarboardTypeWeight",
            "chainLengthPortShackles",
            "chainLengthStarboardShackles",
            "mooringWinchesNumberType",
            "steeringGearMakeModelType",
        ),
        WhenTrue("bowThrusterFitted", RequiredFields("bowThrusterPowerMake")),
        WhenTrue("sternThrusterFitted", RequiredFields("sternThrusterPowerMake")),
    ),
    SectionKey.CARGO_CAPABILITIES: FilledEntries(),
    SectionKey.NAVIGATION_COMMUNICATION: AllOf(
        # navigation
        RequiredFields(
            "radarCount", "gyroCompassMakeModel", "aisMakeModel", "echoSounderMakeModel"
        ),
        IsTrue("magneticCompassFitted"),
        Answered("ecdisFitted"),
        WhenTrue("ecdisFitted", RequiredFields("ecdisMakeModel")),
        # communication
        RequiredFields("gmdssSeaArea", "vhfDscCount"),
    ),
    SectionKey.LIFE_SAVING_APPLIANCES: AllOf(
        AnyOf(
            RequiredFields("lifeboatType", "lifeboatCount", "lifeboatCapacity"),
            RequiredFields("liferaftType", "liferaftCount", "liferaftCapacity"),
        ),
        RequiredFields("epirbType", "sartType"),
    ),
    SectionKey.FIRE_FIGHTING_APPLIANCES: AllOf(
        RequiredFields("engineRoomFixedSystemType"),
        RequiredFields("firePumpsCount", "emergencyFirePumpType"),
        IsTrue("portableExtinguishersAvailable"),
        RequiredFields("breathingApparatusCount", "firemanOutfitsCount"),
    ),
    SectionKey.POLLUTION_PREVENTION: AllOf(
        Answered(
            "annex1_owsFitted",
            "annex1_ppm15AlarmFitted",
            "annex1_oilRecordBookPartI",
            "annex1_sopepSmpepOnboard",
            "annex4_stpFitted",
            "annex5_garbageManagementPlan",
            "annex5_garbageRecordBook",
            "annex6_iappCertificate",
        ),
        RequiredFields("annex6_fuelSulfurComplianceMethod"),
        WhenTrue("annex6_egcsFitted", RequiredFields("annex6_egcsType")),
        ForShipTypes(is_tanker, Answered("annex1_odmeFitted", "annex1_slopTankArrangement")),
        ForShipTypes(
            is_chemical_tanker,
            Answered("annex2_paManualOnboard", "annex2_cargoRecordBookOnboard"),
        ),
    ),
    SectionKey.INERT_GAS_SYSTEM: InertGasRule(),
}


# =============================================================================
# Evaluation
# =============================================================================


def _has_any_data(fields: Any) -> bool:
    return isinstance(fields, Mapping) and any(is_meaningful(v) for v in fields.values())


def evaluate_section(
    section_key: SectionKey | str,
    fields: Any,
    ship_type: str | None = None,
) -> SectionStatus:
    """Classify one section. Pure: no state, no I/O."""
    if not _has_any_data(fields):
        return SectionStatus.NOT_STARTED
    rule = SECTION_RULES[SectionKey(section_key)]
    if is_complete(rule, fields, ship_type):
        return SectionStatus.COMPLETED
    return SectionStatus.IN_PROGRESS


def missing_fields(
    section_key: SectionKey | str,
    fields: Any,
    ship_type: str | None = None,
) -> list[str]:
    """Names of the fields still needed before the section completes."""
    if not isinstance(fields, Mapping):
        fields = {}
    return SECTION_RULES[SectionKey(section_key)].missing(fields, ship_type)


class SectionSummary(BaseModel):
    statuses: dict[SectionKey, SectionStatus]

    @property
    def total(self) -> int:
        return len(self.statuses)

    @property
    def completed(self) -> int:
        return self._count(SectionStatus.COMPLETED)

    @property
    def in_progress(self) -> int:
        return self._count(SectionStatus.IN_PROGRESS)

    @property
    def not_started(self) -> int:
        return self._count(SectionStatus.NOT_STARTED)

    def _count(self, status: SectionStatus) -> int:
        return sum(1 for s in self.statuses.values() if s == status)


def summarize_sections(
    sections: Mapping[SectionKey, Any] | None,
    ship_type: str | None = None,
) -> SectionSummary:
    """Status of every fixed section, for dashboards."""
    sections = sections or {}
    return SectionSummary(
        statuses={key: evaluate_section(key, sections.get(key), ship_type) for key in SectionKey}
    )
