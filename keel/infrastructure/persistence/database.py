"""Database engine ownership.

The engine is created by ``Database.start()`` and disposed by ``Database.stop()``;
its lifetime is tied to the application session rather than to first access.
"""

import logging
import os
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.pool import StaticPool

from keel.config import DatabaseConfig
from keel.domain.shared.error import ConfigurationError

logger = logging.getLogger(__name__)


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite URLs and ensure parent directory exists."""
    if not url.startswith("sqlite") or ":memory:" in url or url.rstrip("/").endswith("sqlite:"):
        return url

    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    path = url[prefix_end:]

    expanded = os.path.expanduser(path)
    abs_path = os.path.abspath(expanded)

    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)

    return f"{prefix}{abs_path}"


def _is_in_memory(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith("sqlite:"))


def create_db_engine(config: DatabaseConfig) -> Engine:
    """Create the database engine.

    Handles SQLite and PostgreSQL with appropriate settings.
    """
    url = _expand_sqlite_path(config.url)
    engine_kwargs: dict[str, Any] = {"echo": config.echo}

    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if _is_in_memory(url):
            # One shared connection, otherwise every checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        event.listen(engine, "connect", _sqlite_pragmas)

    return engine


def _sqlite_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


class Database:
    """Owns the engine for one application session."""

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: Engine | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise ConfigurationError("Database is not started")
        return self._engine

    @property
    def is_started(self) -> bool:
        return self._engine is not None

    def start(self) -> Engine:
        if self._engine is None:
            self._engine = create_db_engine(self._config)
            if self._config.auto_migrate:
                from keel.infrastructure.persistence.migrate import ensure_schema

                ensure_schema(self._engine)
            logger.info(
                "Database started: %s", self._engine.url.render_as_string(hide_password=True)
            )
        return self._engine

    def stop(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database stopped")
