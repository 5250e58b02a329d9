"""Ship type catalog and normalization.

A ship type selects which sections the wizard shows and tunes some completion
rules (tankers cannot declare the inert gas system "not fitted"). It never
changes the fixed section schema.
"""

import re

from keel.domain.sea_service.model.value import SectionKey
from keel.domain.shared.model.value import ValueObject

TANKER_TYPES = frozenset({"TANKER", "OIL_TANKER", "PRODUCT_TANKER", "CHEMICAL_TANKER"})


def normalize_ship_type(ship_type: str | None) -> str:
    """'Oil Tanker' -> 'OIL_TANKER', 'ro-ro' -> 'RO_RO', None -> ''."""
    if not ship_type:
        return ""
    return re.sub(r"\s+", "_", ship_type.strip().upper().replace("-", "_"))


def is_tanker(ship_type: str | None) -> bool:
    return normalize_ship_type(ship_type) in TANKER_TYPES


def is_chemical_tanker(ship_type: str | None) -> bool:
    return normalize_ship_type(ship_type) == "CHEMICAL_TANKER"


class ShipTypeDefinition(ValueObject):
    code: str
    title: str
    enabled_sections: tuple[SectionKey, ...]


_ALL_SECTIONS = tuple(SectionKey)
_WITHOUT_IGS = tuple(k for k in SectionKey if k is not SectionKey.INERT_GAS_SYSTEM)

SHIP_TYPES: tuple[ShipTypeDefinition, ...] = (
    ShipTypeDefinition(code="BULK_CARRIER", title="Bulk Carrier", enabled_sections=_WITHOUT_IGS),
    ShipTypeDefinition(code="OIL_TANKER", title="Oil Tanker", enabled_sections=_ALL_SECTIONS),
    ShipTypeDefinition(
        code="PRODUCT_TANKER", title="Product Tanker", enabled_sections=_ALL_SECTIONS
    ),
    ShipTypeDefinition(
        code="CHEMICAL_TANKER", title="Chemical Tanker", enabled_sections=_ALL_SECTIONS
    ),
    ShipTypeDefinition(code="GAS_TANKER", title="Gas Carrier", enabled_sections=_ALL_SECTIONS),
    ShipTypeDefinition(code="CONTAINER", title="Container Ship", enabled_sections=_WITHOUT_IGS),
    ShipTypeDefinition(code="GENERAL_CARGO", title="General Cargo", enabled_sections=_WITHOUT_IGS),
    ShipTypeDefinition(code="RO_RO", title="Ro-Ro", enabled_sections=_WITHOUT_IGS),
    ShipTypeDefinition(code="CAR_CARRIER", title="Car Carrier", enabled_sections=_WITHOUT_IGS),
    ShipTypeDefinition(code="PASSENGER", title="Passenger Ship", enabled_sections=_WITHOUT_IGS),
)


def get_ship_type(code: str | None) -> ShipTypeDefinition | None:
    normalized = normalize_ship_type(code)
    return next((t for t in SHIP_TYPES if t.code == normalized), None)


def applicable_sections(code: str | None) -> tuple[SectionKey, ...]:
    """Sections the wizard shows for a ship type. Unknown or unset types show none."""
    definition = get_ship_type(code)
    return definition.enabled_sections if definition else ()
