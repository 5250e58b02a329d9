from keel.domain.sea_service.model.aggregate import SeaServiceRecord
from keel.domain.sea_service.model.value import (
    RecordStatus,
    SeaServicePayload,
    SectionKey,
    SectionStatus,
    ServicePeriod,
    SyncState,
)

__all__ = [
    "RecordStatus",
    "SeaServicePayload",
    "SeaServiceRecord",
    "SectionKey",
    "SectionStatus",
    "ServicePeriod",
    "SyncState",
]
