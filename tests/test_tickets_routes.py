from ticketdesk.models import Ticket

VIP = 'Tickets VIP'


def test_pages_require_sign_in(client):
    for path in ['/', '/tickets', '/api/tickets']:
        response = client.get(path)
        assert response.status_code == 302
        assert '/login' in response.headers['Location']

    response = client.post('/tickets/register', json={'tipo': 'VIP'})
    assert response.status_code in (302, 401)


def test_dashboard_shows_summary(logged_in_client, make_tickets):
    make_tickets('VIP', ['000001'])
    make_tickets('GEN', ['000001'], estado='POR_PAGAR')

    response = logged_in_client.get('/')

    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert 'Total vendidos: <strong>2</strong>' in body
    assert 'S/ 40' in body
    assert 'Ana Torres' in body


def test_register_from_form(app, logged_in_client, fake_sheets):
    fake_sheets.provision(VIP, ['VIP-000001', 'VIP-000002'])

    response = logged_in_client.post('/tickets/register', data={
        'tipo': 'VIP',
        'nombre_comprador': 'maria pérez',
        'contacto_comprador': '',
        'numero': ['000001', '000002'],
        'estado': ['PAGADO', 'GRATIS'],
    }, follow_redirects=True)

    assert response.status_code == 200
    assert '¡2 ticket(s) registrado(s) con éxito!' in response.get_data(as_text=True)
    with app.app_context():
        stored = {t.numero_ticket: t for t in Ticket.query.all()}
        assert stored['VIP-000001'].estado == 'PAGADO'
        assert stored['VIP-000002'].estado == 'GRATIS'
        assert stored['VIP-000001'].vendedor_nombre == 'Ana Torres'
        assert stored['VIP-000001'].contacto_comprador is None
    assert fake_sheets.row(VIP, 3)[3:] == ['GRATIS', 0]


def test_register_json_returns_created(logged_in_client):
    response = logged_in_client.post('/tickets/register', json={
        'tipo': 'GEN',
        'nombre_comprador': 'Luis',
        'tickets': [{'numero': '000010', 'estado': 'POR_PAGAR'}],
    })

    assert response.status_code == 201
    data = response.get_json()
    assert data['success'] is True
    assert data['tickets'][0]['numeroTicket'] == 'GEN-000010'
    assert data['tickets'][0]['estado'] == 'POR_PAGAR'


def test_register_duplicate_is_conflict(app, logged_in_client, make_tickets):
    make_tickets('GEN', ['000002'])

    response = logged_in_client.post('/tickets/register', json={
        'tipo': 'GEN',
        'nombre_comprador': 'Carla',
        'tickets': [{'numero': n} for n in ('000001', '000002', '000003')],
    })

    assert response.status_code == 409
    data = response.get_json()
    assert data['success'] is False
    assert 'GEN-000002' in data['message']
    with app.app_context():
        assert Ticket.query.count() == 1


def test_register_invalid_number_is_bad_request(logged_in_client):
    response = logged_in_client.post('/tickets/register', json={
        'tipo': 'VIP', 'nombre_comprador': 'Carla', 'tickets': [{'numero': '123'}],
    })
    assert response.status_code == 400
    assert response.get_json()['success'] is False


def test_register_form_error_flashes(logged_in_client):
    response = logged_in_client.post('/tickets/register', data={
        'tipo': 'VIP', 'nombre_comprador': '', 'numero': ['000001'],
    }, follow_redirects=True)

    assert response.status_code == 200
    assert 'flash-error' in response.get_data(as_text=True)


def test_get_and_edit_ticket(app, logged_in_client, make_tickets):
    [snap] = make_tickets('GEN', ['000500'], estado='POR_PAGAR')

    response = logged_in_client.get(f"/tickets/{snap['id']}")
    assert response.status_code == 200
    assert response.get_json()['ticket']['numeroTicket'] == 'GEN-000500'

    response = logged_in_client.post(f"/tickets/{snap['id']}/edit", json={
        'tipo': 'VIP', 'estado': 'PAGADO', 'nombre_comprador': 'Luis Rojas', 'numero': '000501',
    })
    assert response.status_code == 200
    ticket = response.get_json()['ticket']
    assert (ticket['numeroTicket'], ticket['estado']) == ('VIP-000501', 'PAGADO')


def test_edit_keeps_suffix_when_number_omitted(logged_in_client, make_tickets):
    [snap] = make_tickets('GEN', ['000500'])

    response = logged_in_client.post(f"/tickets/{snap['id']}/edit", data={
        'tipo': 'VIP', 'estado': 'GRATIS', 'nombre_comprador': 'Luis Rojas', 'numero': '',
    })

    assert response.status_code == 302
    data = logged_in_client.get(f"/tickets/{snap['id']}").get_json()
    assert data['ticket']['numeroTicket'] == 'VIP-000500'
    assert data['ticket']['estado'] == 'GRATIS'


def test_unknown_ticket_is_not_found(logged_in_client):
    assert logged_in_client.get('/tickets/nope').status_code == 404
    assert logged_in_client.post('/tickets/nope/delete', json={}).status_code == 404
    response = logged_in_client.post('/tickets/nope/edit', json={
        'tipo': 'VIP', 'estado': 'PAGADO', 'nombre_comprador': 'X',
    })
    assert response.status_code == 404


def test_delete_ticket(app, logged_in_client, make_tickets):
    [snap] = make_tickets('VIP', ['000001'])

    response = logged_in_client.post(f"/tickets/{snap['id']}/delete", follow_redirects=True)

    assert response.status_code == 200
    assert 'Ticket VIP-000001 eliminado con éxito.' in response.get_data(as_text=True)
    with app.app_context():
        assert Ticket.query.count() == 0


def test_api_lists_filtered_tickets_with_full_summary(logged_in_client, make_tickets):
    make_tickets('VIP', ['000001'], comprador='Maria Pérez')
    make_tickets('GEN', ['000002', '000003'], comprador='Luis Rojas')

    data = logged_in_client.get('/api/tickets?q=pérez').get_json()

    assert [t['numeroTicket'] for t in data['tickets']] == ['VIP-000001']
    assert data['tickets'][0]['nombreComprador'] == 'MARIA PÉREZ'
    assert isinstance(data['tickets'][0]['fechaRegistro'], str)
    assert data['summary']['total'] == 3
    assert data['summary']['total_recaudado'] == 40 + 25 + 25
    assert data['charts']['por_tipo']['data'] == [1, 2]


def test_ticket_list_page_searches(logged_in_client, make_tickets):
    make_tickets('VIP', ['000001'], comprador='Maria Pérez')
    make_tickets('GEN', ['000002'], comprador='Luis Rojas')

    body = logged_in_client.get('/tickets?q=rojas').get_data(as_text=True)

    assert 'GEN-000002' in body
    assert 'VIP-000001' not in body


def test_ticket_list_has_prefilled_edit_form(logged_in_client, make_tickets):
    [snap] = make_tickets('GEN', ['000500'], estado='POR_PAGAR', comprador='Luis Rojas', contacto='999 111 222')

    body = logged_in_client.get('/tickets').get_data(as_text=True)

    assert f'action="/tickets/{snap["id"]}/edit"' in body
    assert 'value="000500" readonly' in body
    assert '<option value="POR_PAGAR" selected>' in body
    assert 'name="tipo" value="GEN" checked' in body
    assert 'value="LUIS ROJAS"' in body
    assert 'value="999 111 222"' in body


def test_dashboard_renders_requested_number_of_ticket_entries(logged_in_client):
    body = logged_in_client.get('/').get_data(as_text=True)
    assert body.count('class="ticket-entry"') == 1
    assert '+ Añadir otro ticket' in body
    assert 'href="/?n=2"' in body

    body = logged_in_client.get('/?n=3').get_data(as_text=True)
    assert body.count('class="ticket-entry"') == 3

    body = logged_in_client.get('/?n=500').get_data(as_text=True)
    assert body.count('class="ticket-entry"') == 20

    body = logged_in_client.get('/?n=abc').get_data(as_text=True)
    assert body.count('class="ticket-entry"') == 1


def test_write_routes_reject_non_object_json(app, logged_in_client, make_tickets):
    [snap] = make_tickets('VIP', ['000001'])

    for body in (['x'], 'x', 7):
        response = logged_in_client.post('/tickets/register', json=body)
        assert response.status_code == 400
        assert response.get_json()['success'] is False

        response = logged_in_client.post(f"/tickets/{snap['id']}/edit", json=body)
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    with app.app_context():
        assert Ticket.query.count() == 1
        assert Ticket.query.one().estado == 'PAGADO'


def test_register_rejects_malformed_ticket_entries(app, logged_in_client):
    for tickets in ('000001', [['000001']], ['000001']):
        response = logged_in_client.post('/tickets/register', json={
            'tipo': 'VIP', 'nombre_comprador': 'Carla', 'tickets': tickets,
        })
        assert response.status_code == 400

    with app.app_context():
        assert Ticket.query.count() == 0
