from keel.domain.shared.event import Event


class SeaServiceNotice(Event):
    """Outcome of one inbound call, rendered by the UI as ephemeral feedback."""

    operation: str
    ok: bool
    message: str
    code: str | None = None
    record_id: str | None = None
