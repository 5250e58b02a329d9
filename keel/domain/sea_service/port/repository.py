from __future__ import annotations

from abc import abstractmethod
from typing import List, Protocol

from keel.domain.sea_service.model.aggregate import SeaServiceRecord
from keel.domain.shared.port import Port


class SeaServiceRepository(Port, Protocol):
    """Durable storage for Sea Service records.

    Implementations refuse to change or delete FINAL records and allow at most
    one DRAFT record at a time, independently of any caller-side checks.
    """

    @abstractmethod
    def get(self, record_id: str) -> SeaServiceRecord | None: ...

    @abstractmethod
    def get_active_draft(self) -> SeaServiceRecord | None: ...

    @abstractmethod
    def list_final(self) -> List[SeaServiceRecord]: ...

    @abstractmethod
    def insert_draft(self, record: SeaServiceRecord) -> None: ...

    @abstractmethod
    def save_draft(self, record: SeaServiceRecord) -> None: ...

    @abstractmethod
    def mark_final(self, record: SeaServiceRecord) -> None: ...

    @abstractmethod
    def delete_draft(self, record_id: str) -> None: ...
