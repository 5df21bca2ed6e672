from datetime import datetime, timezone

from flask import current_app

from ..constants import TicketType, PaymentStatus
from ..errors import TicketValidationError, DuplicateTicketError, TicketNotFoundError
from ..store import TicketStore
from ..utils import is_valid_suffix, build_ticket_code


def _clean(value):
    return (value or '').strip()


class TicketService:
    @staticmethod
    def _check_tipo(tipo):
        if tipo not in TicketType.ALL:
            raise TicketValidationError(f"Tipo de ticket no válido: {tipo}")

    @staticmethod
    def _check_estado(estado):
        if estado not in PaymentStatus.ALL:
            raise TicketValidationError(f"Estado de pago no válido: {estado}")

    @staticmethod
    def _check_buyer(nombre_comprador):
        if not _clean(nombre_comprador):
            raise TicketValidationError('Por favor, ingresa el nombre del comprador.')

    @staticmethod
    def register_tickets(seller_name, tipo, nombre_comprador, contacto_comprador, entries):
        """
        Registers a batch of tickets sold to one buyer.

        Args:
            seller_name: Display name of the signed-in staff member
            tipo: 'VIP' or 'GEN', shared by the whole batch
            nombre_comprador: Buyer name (stored upper-cased)
            contacto_comprador: Optional contact text
            entries: list of {'numero': '000123', 'estado': 'PAGADO'}

        Returns:
            list: The created Ticket objects

        Raises:
            TicketValidationError, DuplicateTicketError. Nothing is written
            unless every ticket of the batch is valid and free.
        """
        TicketService._check_buyer(nombre_comprador)
        if not entries:
            raise TicketValidationError('Agrega al menos un ticket.')
        if any(not is_valid_suffix(_clean(e.get('numero'))) for e in entries):
            raise TicketValidationError(
                'Todos los números de ticket deben tener exactamente 6 dígitos.')
        TicketService._check_tipo(tipo)
        for entry in entries:
            TicketService._check_estado(entry.get('estado'))

        codes = [build_ticket_code(tipo, _clean(e['numero'])) for e in entries]
        seen = set()
        for code in codes:
            if code in seen:
                raise TicketValidationError(f"El ticket {code} está repetido en el formulario.")
            seen.add(code)

        # Not atomic against a concurrent submission of the same code
        for code in codes:
            if TicketStore.find_by_code(code):
                raise DuplicateTicketError(code)

        registered_at = datetime.now(timezone.utc)
        buyer = _clean(nombre_comprador).upper()
        contact = _clean(contacto_comprador) or None
        records = [
            {
                'tipo': tipo,
                'numero_ticket': code,
                'estado': entry['estado'],
                'nombre_comprador': buyer,
                'contacto_comprador': contact,
                'vendedor_nombre': seller_name,
                'fecha_registro': registered_at,
            }
            for code, entry in zip(codes, entries)
        ]
        tickets = TicketStore.create_many(records)
        current_app.logger.info(
            f"{seller_name} registró {len(tickets)} ticket(s): {', '.join(codes)}")
        return tickets

    @staticmethod
    def edit_ticket(ticket_id, tipo, estado, nombre_comprador, contacto_comprador, numero=None):
        """
        Replaces the editable fields of one ticket.

        numero is the six-digit suffix; None or the current suffix keeps the
        number. Changing tipo alone still changes the code (new prefix).
        """
        ticket = TicketStore.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)

        TicketService._check_buyer(nombre_comprador)
        suffix = _clean(numero) if numero is not None else ticket.suffix
        if suffix != ticket.suffix and not is_valid_suffix(suffix):
            raise TicketValidationError('El número de ticket debe tener 6 dígitos.')
        TicketService._check_tipo(tipo)
        TicketService._check_estado(estado)

        nuevo_numero = build_ticket_code(tipo, suffix)
        if nuevo_numero != ticket.numero_ticket and TicketStore.find_by_code(nuevo_numero):
            raise DuplicateTicketError(nuevo_numero)

        return TicketStore.update(ticket, {
            'tipo': tipo,
            'numero_ticket': nuevo_numero,
            'estado': estado,
            'nombre_comprador': _clean(nombre_comprador).upper(),
            'contacto_comprador': _clean(contacto_comprador) or None,
        })

    @staticmethod
    def delete_ticket(ticket_id):
        ticket = TicketStore.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        numero = ticket.numero_ticket
        TicketStore.delete(ticket)
        current_app.logger.info(f"Ticket {numero} eliminado.")
        return numero
