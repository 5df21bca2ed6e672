"""Errors raised by the ticket form flows before anything is written."""


class TicketError(Exception):
    """Base class; the message is meant to be shown to staff."""
    status_code = 400


class TicketValidationError(TicketError):
    pass


class DuplicateTicketError(TicketError):
    status_code = 409

    def __init__(self, numero_ticket):
        self.numero_ticket = numero_ticket
        super().__init__(f"¡Error! El ticket {numero_ticket} ya ha sido registrado.")


class TicketNotFoundError(TicketError):
    status_code = 404

    def __init__(self, ticket_id):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id} no encontrado.")
