"""Read-only views of Sea Service state."""

from keel.cli.console import get_console
from keel.cli.util import open_session
from keel.domain.sea_service.model.section import SEA_SERVICE_SECTIONS
from keel.domain.sea_service.service.completion import missing_fields


def status() -> None:
    """Show the active draft and whether it can be finalized."""
    console = get_console()
    with open_session() as session:
        if session.last_error is not None:
            console.warning(f"Stored state could not be read: {session.last_error.message}")
        if session.active_draft_id is None:
            console.info("No active Sea Service draft. Run 'keel start' to begin.")
            return

        payload = session.payload
        period = payload.service_period
        summary = session.summary
        lines = [
            f"[cyan]Ship type:[/cyan] {payload.ship_type or '-'}",
            f"[cyan]Sign on:[/cyan]   {period.sign_on_date or '-'} {period.sign_on_port or ''}",
            f"[cyan]Sign off:[/cyan]  {period.sign_off_date or '-'} {period.sign_off_port or ''}",
            f"[cyan]Sections:[/cyan]  {summary.completed}/{summary.total} completed, "
            f"{summary.in_progress} in progress",
        ]
        console.panel("\n".join(lines), title=session.active_draft_id, border_style="blue")

        if session.can_finalize:
            console.success("Ready to finalize")
        else:
            console.warning(session.eligibility.describe())


def sections() -> None:
    """List every section of the active draft with its completion status."""
    console = get_console()
    with open_session() as session:
        payload = session.payload
        enabled = set(session.applicable_sections)
        rows = []
        for definition in SEA_SERVICE_SECTIONS:
            fields = payload.sections.get(definition.key)
            rows.append(
                {
                    "key": definition.key,
                    "title": definition.title + ("" if definition.key in enabled else " (hidden)"),
                    "status": console.section_status(session.section_status(definition.key)),
                    "missing": ", ".join(missing_fields(definition.key, fields, payload.ship_type)),
                }
            )
        console.table(
            rows,
            [("key", "Key"), ("title", "Section"), ("status", "Status"), ("missing", "Missing")],
            numbered=True,
        )


def history() -> None:
    """List finalized Sea Service records, most recent first."""
    console = get_console()
    with open_session() as session:
        records = session.history
        if not records:
            console.info("No finalized Sea Service records yet")
            return
        console.table(
            [
                {
                    "id": r.id,
                    "ship": r.ship_name,
                    "imo": r.imo_number,
                    "on": r.sign_on_date,
                    "off": r.sign_off_date,
                    "finalized": r.updated_at.strftime("%Y-%m-%d %H:%M"),
                }
                for r in records
            ],
            [
                ("id", "Id"),
                ("ship", "Ship"),
                ("imo", "IMO"),
                ("on", "Sign on"),
                ("off", "Sign off"),
                ("finalized", "Finalized"),
            ],
            title="Sea Service history",
        )
