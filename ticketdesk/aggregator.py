"""
Dashboard projection of the ticket set.

Everything here is a pure function of the full list of ticket snapshots
(and the search term). Nothing is updated incrementally: every new snapshot
replaces the previous one and the numbers are recomputed from scratch.
"""
from datetime import datetime, timezone

from .constants import TicketType, PaymentStatus
from .utils import ticket_amount

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def summarize(tickets, price_vip=None, price_general=None):
    """
    Counts by type and payment status, plus revenue from paid tickets.
    """
    tickets = list(tickets)
    return {
        'tickets_vip': sum(1 for t in tickets if t['tipo'] == TicketType.VIP),
        'tickets_general': sum(1 for t in tickets if t['tipo'] == TicketType.GENERAL),
        'total': len(tickets),
        'pagados': sum(1 for t in tickets if t['estado'] == PaymentStatus.PAGADO),
        'por_pagar': sum(1 for t in tickets if t['estado'] == PaymentStatus.POR_PAGAR),
        'gratis': sum(1 for t in tickets if t['estado'] == PaymentStatus.GRATIS),
        'total_recaudado': sum(
            ticket_amount(t['tipo'], t['estado'], price_vip, price_general) for t in tickets
        ),
    }


def _registration_key(ticket):
    moment = ticket.get('fechaRegistro')
    if moment is None:
        return _OLDEST
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def filter_and_sort(tickets, search_term=''):
    """
    Newest first; tickets without a registration time sort as the oldest.
    A non-blank search term keeps tickets whose buyer name or code contains
    it, ignoring case.
    """
    ordered = sorted(tickets, key=_registration_key, reverse=True)
    term = (search_term or '').strip().lower()
    if not term:
        return ordered
    return [
        t for t in ordered
        if term in (t.get('nombreComprador') or '').lower()
        or term in (t.get('numeroTicket') or '').lower()
    ]


def chart_data(summary):
    """Series for the two dashboard charts."""
    return {
        'por_tipo': {
            'labels': ['VIP', 'General'],
            'data': [summary['tickets_vip'], summary['tickets_general']],
        },
        'por_estado': {
            'labels': ['Pagados', 'Por Pagar', 'Gratis'],
            'data': [summary['pagados'], summary['por_pagar'], summary['gratis']],
        },
    }


class TicketBoard:
    """
    Live holder for the dashboard. Feed it full snapshots with apply();
    applying the same snapshot again leaves it in the same state.
    """

    def __init__(self, price_vip=None, price_general=None):
        self.price_vip = price_vip
        self.price_general = price_general
        self.tickets = []
        self.search_term = ''
        self.summary = summarize([], price_vip, price_general)
        self.visible = []

    def apply(self, snapshot):
        self.tickets = list(snapshot)
        self._recompute()
        return self

    def search(self, term):
        self.search_term = term or ''
        self.visible = filter_and_sort(self.tickets, self.search_term)
        return self.visible

    def _recompute(self):
        self.summary = summarize(self.tickets, self.price_vip, self.price_general)
        self.visible = filter_and_sort(self.tickets, self.search_term)

    @property
    def charts(self):
        return chart_data(self.summary)
