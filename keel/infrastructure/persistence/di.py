from collections.abc import Iterable

from dishka import Provider, from_context, provide
from sqlalchemy import Engine

from keel.config import Config
from keel.domain.sea_service.port.repository import SeaServiceRepository
from keel.infrastructure.persistence.database import Database
from keel.infrastructure.persistence.repository.sea_service import SqlSeaServiceRepository
from keel.util.di.scope import Scope


class PersistenceProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def get_database(self, config: Config) -> Iterable[Database]:
        database = Database(config.database)
        database.start()
        yield database
        database.stop()

    @provide(scope=Scope.APP)
    def get_engine(self, database: Database) -> Engine:
        return database.engine

    sea_service_repo = provide(
        SqlSeaServiceRepository, scope=Scope.APP, provides=SeaServiceRepository
    )
