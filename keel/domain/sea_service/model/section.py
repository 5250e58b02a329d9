"""Official Sea Service sections, in the order the wizard presents them.

Ship types enable or disable sections from this list, but never reorder it.
"""

from keel.domain.sea_service.model.value import SectionKey
from keel.domain.shared.model.value import ValueObject


class SectionDefinition(ValueObject):
    key: SectionKey
    title: str
    description: str


SEA_SERVICE_SECTIONS: tuple[SectionDefinition, ...] = (
    SectionDefinition(
        key=SectionKey.GENERAL_IDENTITY,
        title="General Identity & Registry",
        description="Basic vessel identity, registry, ownership, and classification details.",
    ),
    SectionDefinition(
        key=SectionKey.DIMENSIONS_TONNAGE,
        title="Dimensions & Tonnages",
        description="Principal dimensions, drafts, tonnages, and hull-related particulars.",
    ),
    SectionDefinition(
        key=SectionKey.PROPULSION_PERFORMANCE,
        title="Main Propulsion & Performance",
        description="Main engine details, propulsion arrangement, and vessel performance data.",
    ),
    SectionDefinition(
        key=SectionKey.AUX_MACHINERY_ELECTRICAL,
        title="Auxiliary Machinery & Electrical",
        description="Generators, boilers, electrical systems, and engine room auxiliaries.",
    ),
    SectionDefinition(
        key=SectionKey.DECK_MACHINERY_MANEUVERING,
        title="Deck Machinery & Maneuvering",
        description="Anchoring, mooring, steering gear, and maneuvering equipment.",
    ),
    SectionDefinition(
        key=SectionKey.CARGO_CAPABILITIES,
        title="Cargo Capabilities",
        description="Cargo systems, capacities, cargo handling equipment, and ballast systems.",
    ),
    SectionDefinition(
        key=SectionKey.NAVIGATION_COMMUNICATION,
        title="Navigation & Communication",
        description="Bridge navigation equipment, communication systems, and GMDSS details.",
    ),
    SectionDefinition(
        key=SectionKey.LIFE_SAVING_APPLIANCES,
        title="Life Saving Appliances (LSA)",
        description="Survival craft, personal life-saving equipment, and distress systems.",
    ),
    SectionDefinition(
        key=SectionKey.FIRE_FIGHTING_APPLIANCES,
        title="Fire Fighting Appliances (FFA)",
        description="Fixed and portable fire fighting systems and breathing apparatus.",
    ),
    SectionDefinition(
        key=SectionKey.POLLUTION_PREVENTION,
        title="Pollution Prevention (MARPOL)",
        description="MARPOL Annex I-VI pollution prevention equipment and procedures.",
    ),
    SectionDefinition(
        key=SectionKey.INERT_GAS_SYSTEM,
        title="Inert Gas System (IGS)",
        description="Inert gas generation, distribution, and cargo tank safety systems.",
    ),
)


def get_section(key: SectionKey | str) -> SectionDefinition:
    for section in SEA_SERVICE_SECTIONS:
        if section.key == key:
            return section
    raise KeyError(key)
