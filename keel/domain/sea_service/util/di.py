from dishka import Provider, provide

from keel.domain.sea_service.port.repository import SeaServiceRepository
from keel.domain.sea_service.service.lifecycle import DraftLifecycleManager
from keel.util.di.scope import Scope


class SeaServiceProvider(Provider):
    # Factory keeps the default clock out of the graph
    @provide(scope=Scope.APP)
    def get_lifecycle(self, repository: SeaServiceRepository) -> DraftLifecycleManager:
        return DraftLifecycleManager(repository=repository)
