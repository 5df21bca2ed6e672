import click
from flask import current_app
from flask.cli import with_appcontext

from ticketdesk.models import Ticket
from ticketdesk.sheets.mirror import MirrorWriter, mirror_enabled


@click.command('mirror-resync')
@click.option('--dry-run', is_flag=True, default=False, help='Only report which codes have a row')
@with_appcontext
def mirror_resync(dry_run):
    """
    Rewrites the spreadsheet row of every ticket, as if each one had just
    been created. Safe to run repeatedly.
    """
    if not mirror_enabled(current_app):
        click.echo("Error: the spreadsheet mirror is not configured (SPREADSHEET_ID).")
        return

    writer = MirrorWriter.for_app(current_app._get_current_object())
    tickets = Ticket.query.order_by(Ticket.fecha_registro.asc()).all()

    written, missing, failed = 0, [], []
    for ticket in tickets:
        snapshot = ticket.to_snapshot()
        try:
            if dry_run:
                tab = writer.tab_for(snapshot['tipo'])
                row = writer.locator.find_row(tab, snapshot['numeroTicket'])
            else:
                row = writer.created(snapshot)
        except Exception as e:
            current_app.logger.error(f"Error resyncing {snapshot['numeroTicket']}: {e}")
            failed.append(snapshot['numeroTicket'])
            continue

        if row is None:
            missing.append(snapshot['numeroTicket'])
        else:
            written += 1

    verb = "Found" if dry_run else "Wrote"
    click.echo(f"{verb} {written} of {len(tickets)} ticket rows.")
    if missing:
        click.echo(f"Missing rows: {', '.join(missing)}")
    if failed:
        click.echo(f"Failed: {', '.join(failed)}")
