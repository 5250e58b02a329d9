"""Helpers shared by CLI commands."""

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

import yaml

from keel.application.di import create_container
from keel.application.session import SeaServiceSession
from keel.cli.console import get_console
from keel.config import Config, configure_logging
from keel.domain.sea_service.event import SeaServiceNotice
from keel.domain.shared.error import KeelError


@contextmanager
def open_session() -> Iterator[SeaServiceSession]:
    """Yield a hydrated session; the database is closed on exit."""
    config = Config()
    configure_logging(config.logging)
    container = create_container(config)
    try:
        try:
            session = container.get(SeaServiceSession)
        except KeelError as e:
            get_console().error(e.message, hint=e.code)
            sys.exit(1)
        yield session
    finally:
        container.close()


def report(notice: SeaServiceNotice) -> None:
    """Print a notice and exit non-zero when the call was refused."""
    get_console().notice(notice)
    if not notice.ok:
        sys.exit(1)


def parse_assignments(assignments: tuple[str, ...] | list[str]) -> dict[str, Any]:
    """Turn ``field=value`` pairs into a mapping.

    Values are read as YAML scalars, so ``true``, ``12`` and ``3.5`` arrive as
    bool, int and float. Dates stay ISO strings; an empty value clears the field.
    """
    fields: dict[str, Any] = {}
    for assignment in assignments:
        name, sep, raw = assignment.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Expected field=value, got {assignment!r}")
        fields[name] = _parse_value(raw)
    return fields


def _parse_value(raw: str) -> Any:
    if not raw.strip():
        return None
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (dict, list)) or value is None:
        return raw
    return value
