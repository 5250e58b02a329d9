"""Custom Dishka scopes for keel."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """keel dependency injection scopes.

    - APP: Process lifetime (database, bus, lifecycle manager, session)
    """

    APP = new_scope("APP")
