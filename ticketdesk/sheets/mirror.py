# ticketdesk/sheets/mirror.py
"""
Keeps the shared spreadsheet in step with the tickets table.

Each tab ("Tickets VIP", "Tickets General") has the ticket codes
pre-provisioned in column A. Mirroring a ticket means finding the row whose
column A equals its code and overwriting B..F with
[seller, timestamp, buyer, status, amount]. Clearing writes five empty
strings. A code without a row is skipped with a warning.

The mirror is best effort: receivers swallow every error, nothing is
retried, and the database change that triggered it always stands.
"""
from flask import current_app

from .. import cache
from ..constants import (
    TicketType, SHEET_CODE_COLUMN, SHEET_FIRST_DATA_COLUMN,
    SHEET_LAST_DATA_COLUMN, SHEET_EMPTY_ROW
)
from ..events import ticket_created, ticket_updated, ticket_deleted
from ..utils import ticket_amount, format_sheet_timestamp
from .client import get_sheets_client


class RowLocator:
    """
    Finds the row of a ticket code by scanning column A.

    With a positive cache_timeout the last scan of each tab is kept as a
    code -> row map. A cached row is re-read before it is trusted; a stale
    entry or a code missing from the map triggers a fresh scan.
    """

    def __init__(self, client, cache_timeout=0):
        self.client = client
        self.cache_timeout = cache_timeout

    def _cache_key(self, tab):
        return f"sheet_rows_{self.client.spreadsheet_id}_{tab}"

    def scan(self, tab):
        column = self.client.read_column(tab, SHEET_CODE_COLUMN)
        index = {}
        for position, cells in enumerate(column):
            # First match wins, like a top-to-bottom search
            if cells and cells[0] not in index:
                index[cells[0]] = position + 1
        if self.cache_timeout > 0:
            cache.set(self._cache_key(tab), index, timeout=self.cache_timeout)
        return index

    def find_row(self, tab, numero_ticket):
        if self.cache_timeout > 0:
            index = cache.get(self._cache_key(tab))
            if index:
                row = index.get(numero_ticket)
                if row is not None and \
                        self.client.read_cell(tab, SHEET_CODE_COLUMN, row) == numero_ticket:
                    return row
        return self.scan(tab).get(numero_ticket)


class MirrorWriter:
    def __init__(self, client, config, locator=None):
        self.client = client
        self.config = config
        self.locator = locator or RowLocator(client, config.get('SHEET_ROW_CACHE_TIMEOUT', 0))

    @classmethod
    def for_app(cls, app):
        return cls(get_sheets_client(app), app.config)

    def tab_for(self, tipo):
        if tipo == TicketType.VIP:
            return self.config['SHEET_TAB_VIP']
        return self.config['SHEET_TAB_GENERAL']

    def timestamp(self, moment=None):
        return format_sheet_timestamp(moment, self.config.get('MIRROR_TIMEZONE', 'America/Lima'))

    def row_values(self, ticket, timestamp):
        amount = ticket_amount(
            ticket['tipo'], ticket['estado'],
            self.config.get('PRICE_VIP'), self.config.get('PRICE_GENERAL')
        )
        return [
            ticket['vendedorNombre'],
            timestamp,
            ticket['nombreComprador'],
            ticket['estado'],
            amount,
        ]

    def _write(self, tab, numero_ticket, values, raw=False):
        """Returns the row written, or None when the code has no row."""
        row = self.locator.find_row(tab, numero_ticket)
        if row is None:
            current_app.logger.warning(
                f"Ticket {numero_ticket} no fue encontrado en la hoja '{tab}'.")
            return None
        self.client.write_row(tab, row, SHEET_FIRST_DATA_COLUMN, SHEET_LAST_DATA_COLUMN,
                              values, raw=raw)
        return row

    def created(self, ticket):
        current_app.logger.info(f"Nuevo ticket registrado: {ticket['numeroTicket']}")
        tab = self.tab_for(ticket['tipo'])
        return self._write(tab, ticket['numeroTicket'],
                           self.row_values(ticket, self.timestamp()))

    def updated(self, before, after):
        if before['numeroTicket'] != after['numeroTicket']:
            current_app.logger.info(
                f"El ticket cambió de {before['numeroTicket']} a {after['numeroTicket']}.")
            # Not atomic: a failure after the clear leaves the new row unwritten
            self.clear(before)
            tab = self.tab_for(after['tipo'])
            return self._write(tab, after['numeroTicket'],
                               self.row_values(after, self.timestamp()))

        current_app.logger.info(f"Actualizando datos para el ticket {after['numeroTicket']}.")
        # Same code: keep showing the original sale time
        registered = before.get('fechaRegistro') or after.get('fechaRegistro')
        tab = self.tab_for(after['tipo'])
        return self._write(tab, after['numeroTicket'],
                           self.row_values(after, self.timestamp(registered)))

    def clear(self, ticket):
        tab = self.tab_for(ticket['tipo'])
        return self._write(tab, ticket['numeroTicket'], list(SHEET_EMPTY_ROW), raw=True)

    def deleted(self, ticket):
        current_app.logger.info(f"El ticket {ticket['numeroTicket']} fue borrado. Limpiando hoja.")
        return self.clear(ticket)


def on_ticket_created(sender, ticket, **extra):
    try:
        MirrorWriter.for_app(sender).created(ticket)
    except Exception as e:
        current_app.logger.error(
            f"Error al escribir en la hoja durante la creación de {ticket.get('numeroTicket')}: {e}")


def on_ticket_updated(sender, before, after, **extra):
    try:
        MirrorWriter.for_app(sender).updated(before, after)
    except Exception as e:
        current_app.logger.error(
            f"Error al actualizar la hoja tras editar {after.get('numeroTicket')}: {e}")


def on_ticket_deleted(sender, ticket, **extra):
    try:
        MirrorWriter.for_app(sender).deleted(ticket)
    except Exception as e:
        current_app.logger.error(
            f"Error al limpiar la hoja tras borrar {ticket.get('numeroTicket')}: {e}")


def mirror_enabled(app):
    return bool(app.config.get('MIRROR_ENABLED')) and bool(app.config.get('SPREADSHEET_ID'))


def init_mirror(app):
    """Connects the mirror receivers for this app, when configured."""
    if not mirror_enabled(app):
        app.logger.info("Spreadsheet mirror disabled (no SPREADSHEET_ID or MIRROR_ENABLED off).")
        return False

    ticket_created.connect(on_ticket_created, sender=app)
    ticket_updated.connect(on_ticket_updated, sender=app)
    ticket_deleted.connect(on_ticket_deleted, sender=app)
    return True
