from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db_modules.db_invoices import compute_invoice_amount
from models import Invoice


@pytest.fixture
def setup(client, admin_headers, club_account, make_event, make_starting_list, make_member):
    club_id = club_account[1]
    event = make_event()
    starting_list = make_starting_list(event['id'])
    members = [make_member(club_id, name='Budi'), make_member(club_id, name='Sari')]
    for member_id in members:
        response = client.post(f"/api/v1/events/{event['id']}/starting-list/{starting_list['id']}/participants",
                               json={'member_id': member_id}, headers=admin_headers)
        assert response.status_code == 201
    return {'club_id': club_id, 'event': event, 'list_id': starting_list['id'], 'members': members}


def invoice_body(setup, **overrides):
    body = {
        'event_id': setup['event']['id'],
        'due_date': '2030-05-20T00:00:00',
        'items': [
            {'starting_list_id': setup['list_id'], 'member_id': setup['members'][0],
             'description': 'Entry fee 50m freestyle', 'quantity': 2, 'unit_price': 75000.5},
            {'starting_list_id': setup['list_id'], 'member_id': setup['members'][1],
             'description': 'Entry fee 50m freestyle', 'quantity': 1, 'unit_price': 12.25},
        ],
    }
    body.update(overrides)
    return body


def url(setup, suffix=''):
    return f"/api/v1/clubs/{setup['club_id']}/invoices{suffix}"


def test_amount_is_sum_of_items_ignoring_client_amount(client, admin_headers, setup):
    response = client.post(url(setup), json=invoice_body(setup, amount=1), headers=admin_headers)

    assert response.status_code == 201
    invoice = response.get_json()['data']
    assert invoice['amount'] == 150013.25
    assert [item['total_price'] for item in invoice['items']] == [150001.0, 12.25]
    assert invoice['reference_number'].startswith('INV-')
    assert invoice['status'] == 'draft'


def test_compute_invoice_amount_is_exact():
    items = [{'quantity': 3, 'unit_price': Decimal('0.10')},
             {'quantity': 1, 'unit_price': Decimal('0.20')}]

    assert compute_invoice_amount(items) == Decimal('0.50')


def test_invoice_requires_items(client, admin_headers, setup):
    response = client.post(url(setup), json=invoice_body(setup, items=[]), headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'items'


def test_item_validation_errors_carry_paths(client, admin_headers, setup):
    body = invoice_body(setup)
    body['items'][1]['quantity'] = 0
    body['items'][1]['description'] = 'ab'

    response = client.post(url(setup), json=body, headers=admin_headers)

    fields = {e['field'] for e in response.get_json()['errors']}
    assert fields == {'items.1.quantity', 'items.1.description'}


def test_item_list_must_belong_to_invoiced_event(client, admin_headers, setup, make_event,
                                                 make_starting_list):
    other_event = make_event(name='Other')
    other_list = make_starting_list(other_event['id'])
    body = invoice_body(setup)
    body['items'][0]['starting_list_id'] = other_list['id']

    response = client.post(url(setup), json=body, headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'items.0.starting_list_id'


def test_duplicate_reference_number_is_conflict(client, admin_headers, setup, db_manager):
    first = client.post(url(setup), json=invoice_body(setup, reference_number='INV-1'),
                        headers=admin_headers)
    second = client.post(url(setup), json=invoice_body(setup, reference_number='INV-1'),
                         headers=admin_headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.get_json()['message'] == 'Reference number already in use'
    with db_manager.session_scope() as session:
        assert session.scalar(select(func.count()).select_from(Invoice)) == 1


def test_reference_number_race_is_conflict(client, admin_headers, setup, monkeypatch):
    """A duplicate committed between the check and the insert still maps to 409"""
    client.post(url(setup), json=invoice_body(setup, reference_number='INV-1'), headers=admin_headers)
    real_scalar = Session.scalar

    def miss_reference_check(session, statement, *args, **kwargs):
        if 'invoices.reference_number' in str(statement):
            return None
        return real_scalar(session, statement, *args, **kwargs)

    monkeypatch.setattr(Session, 'scalar', miss_reference_check)

    response = client.post(url(setup), json=invoice_body(setup, reference_number='INV-1'),
                           headers=admin_headers)

    assert response.status_code == 409


def test_item_member_must_belong_to_club(client, admin_headers, setup, app, db_manager,
                                         make_member):
    with app.app_context():
        other = db_manager.register_user('hiu@example.com', 'hiu_biru', 'secret123')
    outsider = make_member(other['club']['id'], name='Outsider')
    body = invoice_body(setup)
    body['items'][0]['member_id'] = outsider

    response = client.post(url(setup), json=body, headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'] == [
        {'field': 'items.0.member_id', 'message': 'Club member not found in this club'}]


def test_item_member_must_be_entered_in_list(client, admin_headers, setup, make_member):
    body = invoice_body(setup)
    body['items'][1]['member_id'] = make_member(setup['club_id'], name='Not entered')

    response = client.post(url(setup), json=body, headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'] == [
        {'field': 'items.1.member_id', 'message': 'Member is not entered in this starting list'}]


def test_list_invoices_with_totals_search_and_status(client, admin_headers, setup):
    client.post(url(setup), json=invoice_body(setup, reference_number='INV-A', notes='first batch'),
                headers=admin_headers)
    client.post(url(setup), json=invoice_body(setup, reference_number='INV-B', status='paid'),
                headers=admin_headers)

    listing = client.get(url(setup), headers=admin_headers).get_json()
    assert listing['total'] == 2
    row = listing['paginatedData'][0]
    assert row['item_count'] == 2
    assert row['total_amount'] == 150013.25
    assert row['event_name'] == setup['event']['name']

    searched = client.get(url(setup, '?search=batch'), headers=admin_headers).get_json()
    assert [i['reference_number'] for i in searched['paginatedData']] == ['INV-A']

    paid = client.get(url(setup, '?status=paid'), headers=admin_headers).get_json()
    assert [i['reference_number'] for i in paid['paginatedData']] == ['INV-B']


def test_list_limit_is_bounded(client, admin_headers, setup):
    response = client.get(url(setup, '?limit=500'), headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'limit'


def test_update_only_touches_payment_fields(client, admin_headers, setup):
    invoice = client.post(url(setup), json=invoice_body(setup), headers=admin_headers).get_json()['data']

    response = client.put(url(setup, f"/{invoice['id']}"),
                          json={'status': 'paid', 'payment_date': '2030-05-02T10:00:00',
                                'payment_method': 'transfer', 'amount': 1},
                          headers=admin_headers)

    data = response.get_json()['data']
    assert data['status'] == 'paid'
    assert data['payment_method'] == 'transfer'
    assert data['payment_date'] == '2030-05-02T10:00:00'
    assert data['amount'] == invoice['amount']


def test_delete_is_soft_and_cancels(client, admin_headers, setup, db_manager):
    invoice = client.post(url(setup), json=invoice_body(setup), headers=admin_headers).get_json()['data']

    response = client.delete(url(setup, f"/{invoice['id']}"), headers=admin_headers)

    assert response.status_code == 200
    assert client.get(url(setup, f"/{invoice['id']}"), headers=admin_headers).status_code == 404
    assert client.get(url(setup), headers=admin_headers).get_json()['total'] == 0
    with db_manager.session_scope() as session:
        stored = session.get(Invoice, invoice['id'])
        assert stored.status.value == 'canceled'
        assert stored.deleted_at is not None


def test_get_invoice_and_items(client, admin_headers, club_headers, setup):
    invoice = client.post(url(setup), json=invoice_body(setup), headers=admin_headers).get_json()['data']

    detail = client.get(url(setup, f"/{invoice['id']}"), headers=club_headers).get_json()['data']
    items = client.get(url(setup, f"/{invoice['id']}/items?limit=1"), headers=club_headers).get_json()

    assert detail['club']['id'] == setup['club_id']
    assert detail['event']['id'] == setup['event']['id']
    assert detail['items'][0]['member']['name'] == 'Budi'
    assert items['total'] == 2
    assert len(items['paginatedData']) == 1


def test_club_account_cannot_see_other_clubs_invoices(client, club_headers, app, db_manager):
    with app.app_context():
        other = db_manager.register_user('hiu@example.com', 'hiu_biru', 'secret123')

    response = client.get(f"/api/v1/clubs/{other['club']['id']}/invoices", headers=club_headers)

    assert response.status_code == 403


def test_unknown_club_is_404(client, admin_headers, setup):
    body = invoice_body(setup)

    response = client.post('/api/v1/clubs/999/invoices', json=body, headers=admin_headers)

    assert response.status_code == 404
