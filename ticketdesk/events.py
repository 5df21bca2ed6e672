"""
Ticket change notifications.

Every flush that inserts, modifies or deletes a Ticket records a change
with plain-dict snapshots. The changes are only announced once the
transaction commits; a rollback discards them. Receivers get the
snapshots, never the ORM objects, and must not touch the database session
that triggered them.
"""
from blinker import Namespace
from flask import current_app
from sqlalchemy import event, inspect

from . import db
from .models import Ticket

_signals = Namespace()

# sender is the Flask app; kwargs: ticket
ticket_created = _signals.signal('ticket-created')
# sender is the Flask app; kwargs: before, after
ticket_updated = _signals.signal('ticket-updated')
# sender is the Flask app; kwargs: ticket
ticket_deleted = _signals.signal('ticket-deleted')

PENDING_KEY = 'ticketdesk.pending_ticket_changes'

# ORM attribute -> snapshot key
_SNAPSHOT_KEYS = {
    'tipo': 'tipo',
    'numero_ticket': 'numeroTicket',
    'estado': 'estado',
    'nombre_comprador': 'nombreComprador',
    'contacto_comprador': 'contactoComprador',
    'vendedor_nombre': 'vendedorNombre',
    'fecha_registro': 'fechaRegistro',
}


def snapshot_before_flush(ticket):
    """Rebuild the snapshot a dirty ticket had before its pending changes."""
    state = inspect(ticket)
    before = ticket.to_snapshot()
    for attr_name, key in _SNAPSHOT_KEYS.items():
        history = state.attrs[attr_name].history
        if history.deleted:
            before[key] = history.deleted[0]
    return before


@event.listens_for(db.session, 'after_flush')
def _collect_ticket_changes(session, flush_context):
    pending = session.info.setdefault(PENDING_KEY, [])

    for obj in session.new:
        if isinstance(obj, Ticket):
            pending.append(('created', None, obj.to_snapshot()))

    for obj in session.dirty:
        if isinstance(obj, Ticket) and session.is_modified(obj, include_collections=False):
            pending.append(('updated', snapshot_before_flush(obj), obj.to_snapshot()))

    for obj in session.deleted:
        if isinstance(obj, Ticket):
            pending.append(('deleted', obj.to_snapshot(), None))


@event.listens_for(db.session, 'after_commit')
def _announce_ticket_changes(session):
    changes = session.info.pop(PENDING_KEY, [])
    if not changes:
        return

    app = current_app._get_current_object()
    for kind, before, after in changes:
        if kind == 'created':
            ticket_created.send(app, ticket=after)
        elif kind == 'updated':
            ticket_updated.send(app, before=before, after=after)
        else:
            ticket_deleted.send(app, ticket=before)


@event.listens_for(db.session, 'after_rollback')
def _discard_ticket_changes(session):
    session.info.pop(PENDING_KEY, None)
