from dishka import Container, Provider, make_container, provide

from keel.application.session import SeaServiceSession
from keel.config import Config
from keel.domain.sea_service.service.lifecycle import DraftLifecycleManager
from keel.domain.sea_service.util.di import SeaServiceProvider
from keel.domain.shared.event import EventBus
from keel.infrastructure.event.di import EventProvider
from keel.infrastructure.persistence.di import PersistenceProvider
from keel.util.di.scope import Scope


class SessionProvider(Provider):
    @provide(scope=Scope.APP)
    def get_session(self, manager: DraftLifecycleManager, bus: EventBus) -> SeaServiceSession:
        session = SeaServiceSession(manager, bus)
        session.activate()
        return session


def create_container(config: Config | None = None) -> Container:
    config = config or Config()

    return make_container(
        PersistenceProvider(),
        EventProvider(),
        SeaServiceProvider(),
        SessionProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
