"""Main CLI application using Cyclopts.

Each command opens the local database, hydrates a Sea Service session and
closes it again before exiting.
"""

import cyclopts

from keel.cli.commands import draft, status

app = cyclopts.App(
    name="keel",
    help="KEEL - Sea Service records",
)

app.command(status.status, name="status")
app.command(status.sections, name="sections")
app.command(status.history, name="history")
app.command(draft.start, name="start")
app.command(draft.ship_type, name="ship-type")
app.command(draft.section, name="section")
app.command(draft.period, name="period")
app.command(draft.reset, name="reset")
app.command(draft.discard, name="discard")
app.command(draft.finalize, name="finalize")


def main() -> None:
    app()
