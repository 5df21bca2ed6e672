# ticketdesk/tickets_routes.py

from itertools import zip_longest

from flask import Blueprint, render_template, request, redirect, url_for, flash, jsonify, current_app

from .aggregator import TicketBoard
from .auth.utils import login_required, current_staff_name
from .constants import PaymentStatus
from .errors import TicketError, TicketNotFoundError
from .services.ticket_service import TicketService
from .store import TicketStore

tickets_bp = Blueprint('tickets_bp', __name__)

MAX_FORM_ENTRIES = 20


def _wants_json():
    return request.is_json or request.headers.get('X-Requested-With') == 'XMLHttpRequest'


def _payload():
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form


def _board():
    """Fresh projection over the current ticket set."""
    board = TicketBoard(current_app.config['PRICE_VIP'], current_app.config['PRICE_GENERAL'])
    return board.apply(TicketStore.snapshot())


def _serialize(snapshot):
    data = dict(snapshot)
    moment = data.get('fechaRegistro')
    data['fechaRegistro'] = moment.isoformat() if moment else None
    return data


def _register_entries(payload):
    if request.is_json:
        tickets = payload.get('tickets')
        if not isinstance(tickets, list):
            return []
        # Anything but an object becomes an entry that fails validation
        return [
            {'numero': str(t.get('numero', '')), 'estado': t.get('estado', PaymentStatus.PAGADO)}
            if isinstance(t, dict) else {'numero': '', 'estado': PaymentStatus.PAGADO}
            for t in tickets
        ]
    numeros = request.form.getlist('numero')
    estados = request.form.getlist('estado')
    return [
        {'numero': numero, 'estado': estado or PaymentStatus.PAGADO}
        for numero, estado in zip_longest(numeros, estados[:len(numeros)])
    ]


def _failure(message, status, redirect_to):
    if _wants_json():
        return jsonify(success=False, message=message), status
    flash(message, 'error')
    return redirect(redirect_to)


@tickets_bp.route('/')
@login_required
def dashboard():
    board = _board()
    # Number of ticket fieldsets in the register form
    entry_count = min(max(request.args.get('n', 1, type=int), 1), MAX_FORM_ENTRIES)
    return render_template('dashboard.html',
                           entry_count=entry_count,
                           summary=board.summary,
                           charts=board.charts)


@tickets_bp.route('/tickets')
@login_required
def list_tickets():
    board = _board()
    search_term = request.args.get('q', '')
    tickets = board.search(search_term)
    return render_template('tickets.html', tickets=tickets, search_term=search_term)


@tickets_bp.route('/api/tickets')
@login_required
def tickets_api():
    board = _board()
    tickets = board.search(request.args.get('q', ''))
    return jsonify({
        'tickets': [_serialize(t) for t in tickets],
        'summary': board.summary,
        'charts': board.charts,
    })


@tickets_bp.route('/tickets/<ticket_id>')
@login_required
def get_ticket(ticket_id):
    ticket = TicketStore.get(ticket_id)
    if ticket is None:
        return jsonify(success=False, message=str(TicketNotFoundError(ticket_id))), 404
    return jsonify({'ticket': ticket.to_dict()})


@tickets_bp.route('/tickets/register', methods=['POST'])
@login_required
def register_tickets():
    payload = _payload()
    try:
        tickets = TicketService.register_tickets(
            seller_name=current_staff_name(),
            tipo=payload.get('tipo'),
            nombre_comprador=payload.get('nombre_comprador'),
            contacto_comprador=payload.get('contacto_comprador'),
            entries=_register_entries(payload),
        )
    except TicketError as e:
        return _failure(str(e), e.status_code, url_for('tickets_bp.dashboard'))
    except Exception as e:
        current_app.logger.error(f"Error al guardar el/los ticket(s): {e}")
        return _failure('Hubo un problema al registrar. Inténtalo de nuevo.', 500,
                        url_for('tickets_bp.dashboard'))

    message = f"¡{len(tickets)} ticket(s) registrado(s) con éxito!"
    if _wants_json():
        return jsonify(success=True, message=message,
                       tickets=[t.to_dict() for t in tickets]), 201
    flash(message, 'success')
    return redirect(url_for('tickets_bp.dashboard'))


@tickets_bp.route('/tickets/<ticket_id>/edit', methods=['POST'])
@login_required
def edit_ticket(ticket_id):
    payload = _payload()
    numero = payload.get('numero')
    try:
        ticket = TicketService.edit_ticket(
            ticket_id,
            tipo=payload.get('tipo'),
            estado=payload.get('estado'),
            nombre_comprador=payload.get('nombre_comprador'),
            contacto_comprador=payload.get('contacto_comprador'),
            numero=str(numero) if numero else None,
        )
    except TicketError as e:
        return _failure(str(e), e.status_code, url_for('tickets_bp.list_tickets'))
    except Exception as e:
        current_app.logger.error(f"Error al actualizar el ticket {ticket_id}: {e}")
        return _failure('Hubo un problema al guardar los cambios.', 500,
                        url_for('tickets_bp.list_tickets'))

    message = '¡Ticket actualizado con éxito!'
    if _wants_json():
        return jsonify(success=True, message=message, ticket=ticket.to_dict())
    flash(message, 'success')
    return redirect(url_for('tickets_bp.list_tickets'))


@tickets_bp.route('/tickets/<ticket_id>/delete', methods=['POST'])
@login_required
def delete_ticket(ticket_id):
    try:
        numero = TicketService.delete_ticket(ticket_id)
    except TicketError as e:
        return _failure(str(e), e.status_code, url_for('tickets_bp.list_tickets'))
    except Exception as e:
        current_app.logger.error(f"Error al eliminar el ticket {ticket_id}: {e}")
        return _failure('Hubo un problema al eliminar el ticket.', 500,
                        url_for('tickets_bp.list_tickets'))

    message = f"Ticket {numero} eliminado con éxito."
    if _wants_json():
        return jsonify(success=True, message=message)
    flash(message, 'success')
    return redirect(url_for('tickets_bp.list_tickets'))
