"""Commands that change the active Sea Service draft."""

import sys

from keel.cli.console import get_console
from keel.cli.util import open_session, parse_assignments, report
from keel.domain.sea_service.model.ship_type import SHIP_TYPES


def start() -> None:
    """Start a new Sea Service draft."""
    with open_session() as session:
        report(session.start_new_draft())
        get_console().info(f"Draft id: {session.active_draft_id}")


def ship_type(code: str | None = None, /, *, clear: bool = False) -> None:
    """Set the ship type of the active draft, or list the known types.

    Args:
        code: Ship type code, e.g. OIL_TANKER. Omit to list the catalog.
        clear: Remove the ship type from the draft.
    """
    console = get_console()
    if code is None and not clear:
        console.table(
            [
                {"code": t.code, "title": t.title, "sections": len(t.enabled_sections)}
                for t in SHIP_TYPES
            ],
            [("code", "Code"), ("title", "Ship type"), ("sections", "Sections")],
            title="Ship types",
        )
        return

    with open_session() as session:
        report(session.set_ship_type(None if clear else code))


def section(key: str, /, *assignments: str) -> None:
    """Merge field values into one section of the active draft.

    Args:
        key: Section key, e.g. GENERAL_IDENTITY.
        assignments: field=value pairs. An empty value clears the field.
    """
    try:
        fields = parse_assignments(assignments)
    except ValueError as e:
        get_console().error(str(e), hint="Example: keel section GENERAL_IDENTITY shipName=Aurora")
        sys.exit(2)

    with open_session() as session:
        report(session.update_section(key, fields))
        get_console().info(f"{key}: {session.section_status(key)}")


def period(
    *,
    sign_on_date: str | None = None,
    sign_on_port: str | None = None,
    sign_off_date: str | None = None,
    sign_off_port: str | None = None,
) -> None:
    """Merge service period values into the active draft.

    Args:
        sign_on_date: Sign-on date, YYYY-MM-DD.
        sign_on_port: Port where service started.
        sign_off_date: Sign-off date, YYYY-MM-DD.
        sign_off_port: Port where service ended.
    """
    given = {
        "signOnDate": sign_on_date,
        "signOnPort": sign_on_port,
        "signOffDate": sign_off_date,
        "signOffPort": sign_off_port,
    }
    data = {name: value for name, value in given.items() if value is not None}
    if not data:
        get_console().error(
            "Nothing to update", hint="Pass at least one --sign-on/--sign-off option"
        )
        sys.exit(2)

    with open_session() as session:
        report(session.update_service_period(data))


def reset() -> None:
    """Clear every value from the active draft, keeping the draft itself."""
    with open_session() as session:
        report(session.reset_draft())


def discard(record_id: str | None = None, /, *, force: bool = False) -> None:
    """Permanently delete a draft. Finalized records are never deleted.

    Args:
        record_id: Draft to delete. Defaults to the active draft.
        force: Skip confirmation prompt.
    """
    with open_session() as session:
        target = record_id or session.active_draft_id
        if target is None:
            report(session.discard_draft())
            return
        if not force:
            response = input(f"Discard Sea Service draft {target}? [y/N] ").strip().lower()
            if response != "y":
                print("Aborted")
                sys.exit(1)
        report(session.discard_draft(record_id))


def finalize() -> None:
    """Lock the active draft as a FINAL record."""
    console = get_console()
    with open_session() as session:
        eligibility = session.eligibility
        notice = session.finalize()
        if not notice.ok and notice.code == "ELIGIBILITY_NOT_MET":
            console.error(notice.message)
            for key, fields in eligibility.missing_fields.items():
                console.info(f"  {key}: {', '.join(fields)}")
            sys.exit(1)
        report(notice)
