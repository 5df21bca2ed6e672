"""
Record store for tickets.

Thin layer over the tickets table used by the form flows and the
dashboard. Writes commit immediately; per-ticket change signals are emitted
by the session listeners in ticketdesk.events, and after every committed
write the feed pushes the complete ticket set to its subscribers.
"""
import threading

from flask import current_app

from . import db
from .models import Ticket


class TicketFeed:
    """
    Push channel of full snapshots. Subscribers are called with the list of
    every ticket snapshot, never with a diff.
    """

    def __init__(self):
        self._subscribers = []
        self._lock = threading.Lock()

    def subscribe(self, callback, initial=None):
        """
        Registers callback and, when initial is given, delivers it right away.
        Returns a function that cancels the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)
        if initial is not None:
            callback(initial)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)
        return unsubscribe

    @property
    def has_subscribers(self):
        return bool(self._subscribers)

    def publish(self, snapshot):
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception as e:
                current_app.logger.error(f"Error delivering ticket snapshot: {e}")


feed = TicketFeed()


class TicketStore:
    @staticmethod
    def get(ticket_id):
        return db.session.get(Ticket, ticket_id)

    @staticmethod
    def find_by_code(numero_ticket):
        """All live tickets carrying this code (normally zero or one)."""
        return Ticket.find_by_code(numero_ticket)

    @staticmethod
    def snapshot():
        """Every ticket as a snapshot dict."""
        return [t.to_snapshot() for t in Ticket.query.all()]

    @staticmethod
    def create_many(records):
        """
        Inserts all records in one transaction: either every ticket is
        stored or none is.
        """
        tickets = [Ticket(**record) for record in records]
        try:
            db.session.add_all(tickets)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        TicketStore._publish()
        return tickets

    @staticmethod
    def update(ticket, fields):
        for name, value in fields.items():
            setattr(ticket, name, value)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        TicketStore._publish()
        return ticket

    @staticmethod
    def delete(ticket):
        try:
            db.session.delete(ticket)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        TicketStore._publish()

    @staticmethod
    def subscribe(callback):
        """Subscribes to full snapshots, delivering the current one first."""
        return feed.subscribe(callback, initial=TicketStore.snapshot())

    @staticmethod
    def _publish():
        if feed.has_subscribers:
            feed.publish(TicketStore.snapshot())
