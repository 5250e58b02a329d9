"""Persistence adapter - SQLAlchemy tables, additive migrations, mappers, repositories.

Import modules directly:
    from keel.infrastructure.persistence.database import Database
    from keel.infrastructure.persistence.repository.sea_service import SqlSeaServiceRepository
"""

__all__: list[str] = []
