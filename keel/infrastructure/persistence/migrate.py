"""Additive schema evolution.

Run on every startup. Missing tables are created, missing columns are appended
with their server defaults, missing indexes are built. Existing columns are
never dropped, renamed or retyped, so any historical database can be opened.
"""

import logging
from dataclasses import dataclass, field

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import Column, Connection, Engine, MetaData, Table, inspect
from sqlalchemy.exc import SQLAlchemyError

from keel.domain.shared.error import StorageFailureError
from keel.infrastructure.persistence.tables import metadata as default_metadata

logger = logging.getLogger(__name__)


@dataclass
class SchemaChanges:
    """What ``ensure_schema`` changed. Empty on an up-to-date database."""

    created_tables: list[str] = field(default_factory=list)
    added_columns: list[str] = field(default_factory=list)  # "table.column"
    created_indexes: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created_tables or self.added_columns or self.created_indexes)


def _detached_column(column: Column) -> Column:
    """Fresh copy of a table column, suitable for ALTER TABLE ADD COLUMN."""
    server_default = column.server_default.arg if column.server_default is not None else None
    return Column(
        column.name,
        column.type,
        # A NOT NULL column can only be added to existing rows with a default
        nullable=column.nullable or server_default is None,
        server_default=server_default,
    )


def _add_missing_columns(conn: Connection, table: Table, changes: SchemaChanges) -> None:
    existing = {c["name"] for c in inspect(conn).get_columns(table.name)}
    missing = [c for c in table.columns if c.name not in existing]
    if not missing:
        return
    ops = Operations(MigrationContext.configure(conn))
    for column in missing:
        ops.add_column(table.name, _detached_column(column))
        changes.added_columns.append(f"{table.name}.{column.name}")
        logger.info("Added column %s.%s", table.name, column.name)


def ensure_schema(engine: Engine, metadata: MetaData = default_metadata) -> SchemaChanges:
    changes = SchemaChanges()
    try:
        with engine.begin() as conn:
            existing_tables = set(inspect(conn).get_table_names())
            for table in metadata.sorted_tables:
                if table.name not in existing_tables:
                    table.create(conn)
                    changes.created_tables.append(table.name)
                    logger.info("Created table %s", table.name)
                else:
                    _add_missing_columns(conn, table, changes)

        with engine.begin() as conn:
            for table in metadata.sorted_tables:
                existing_indexes = {ix["name"] for ix in inspect(conn).get_indexes(table.name)}
                for index in table.indexes:
                    if index.name in existing_indexes:
                        continue
                    if table.name in changes.created_tables:
                        continue  # built together with the table
                    index.create(conn, checkfirst=True)
                    changes.created_indexes.append(str(index.name))
                    logger.info("Created index %s", index.name)
    except SQLAlchemyError as e:
        logger.exception("Schema migration failed")
        raise StorageFailureError(f"Could not prepare the local database: {e}") from e

    if not changes.changed:
        logger.debug("Database schema is up to date")
    return changes
