"""Domain events and the bus port they are published through."""

from abc import abstractmethod
from datetime import UTC, datetime
from typing import Any, Callable, ClassVar, NewType, Protocol
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

EventId = NewType("EventId", UUID)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_event_id() -> EventId:
    return EventId(uuid4())


class Event(BaseModel):
    """Base class for domain events.

    Subclasses are automatically registered by name in Event._registry.
    """

    id: EventId = Field(default_factory=_new_event_id)
    created_at: datetime = Field(default_factory=_utc_now)

    _registry: ClassVar[dict[str, type["Event"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._registry[cls.__name__] = cls


class EventBus(Protocol):
    @abstractmethod
    def publish(self, event: Event) -> None: ...

    @abstractmethod
    def subscribe(self, event_type: type[Event], handler: Callable[[Event], None]) -> None: ...
