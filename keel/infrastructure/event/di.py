from dishka import Provider, provide

from keel.domain.shared.event import EventBus
from keel.infrastructure.event.memory_bus import InMemoryEventBus
from keel.util.di.scope import Scope


class EventProvider(Provider):
    @provide(scope=Scope.APP)
    def get_event_bus(self) -> EventBus:
        # Singleton bus for in-process notices
        return InMemoryEventBus()
