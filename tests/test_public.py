import threading

from sqlalchemy import func, select

from app import create_app
from database import DatabaseManager
from models import PublicInvoice, PublicKejurkab


def registration(**overrides):
    body = {
        'registrant_name': 'Rina Marlina',
        'event_name': 'Kejurkab Renang 2030',
        'category': 'KU-2 Putri',
        'email': 'rina@example.com',
        'phone': '081234567890',
    }
    body.update(overrides)
    return body


def register(client, **overrides):
    return client.post('/api/v1/public/kejurkab/register', json=registration(**overrides))


def test_register_creates_invoice_then_registration(client):
    response = register(client)

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['invoice_number'] == data['invoice']['invoice_number']
    assert data['invoice']['status'] == 'pending'
    assert data['invoice']['billed_to'] == 'Rina Marlina'


def test_register_needs_no_token_and_all_fields(client):
    response = client.post('/api/v1/public/kejurkab/register', json={'email': 'rina@example.com'})

    assert response.status_code == 400
    fields = {e['field'] for e in response.get_json()['errors']}
    assert fields == {'registrant_name', 'event_name', 'category', 'phone'}


def test_duplicate_email_or_phone_is_conflict(client, db_manager):
    register(client)

    same_email = register(client, phone='089999999999')
    same_phone = register(client, email='other@example.com')

    assert same_email.status_code == 409
    assert same_phone.status_code == 409
    with db_manager.session_scope() as session:
        assert session.scalar(select(func.count()).select_from(PublicKejurkab)) == 1
        assert session.scalar(select(func.count()).select_from(PublicInvoice)) == 1


def test_phone_is_compared_after_normalization(client):
    register(client, phone='+62 812 3456 7890')

    response = register(client, email='other@example.com', phone='+62-812-3456-7890')

    assert response.status_code == 409


def test_detail_by_registration_and_invoice_number(client):
    data = register(client).get_json()['data']

    detail = client.get(f"/api/v1/public/kejurkab/detail/{data['registration_number']}")
    invoice = client.get(f"/api/v1/public/kejurkab/detail/invoice/{data['invoice_number']}")

    assert detail.status_code == 200
    assert detail.get_json()['data']['email'] == 'rina@example.com'
    assert invoice.get_json()['data']['kejurkab']['registration_number'] == data['registration_number']
    assert client.get('/api/v1/public/kejurkab/detail/unknown').status_code == 404


def test_invoice_status_update_requires_admin(client, admin_headers, club_headers):
    data = register(client).get_json()['data']
    url = f"/api/v1/public/kejurkab/invoice/{data['invoice_number']}/status"

    anonymous = client.put(url, json={'status': 'paid'})
    as_club = client.put(url, json={'status': 'paid'}, headers=club_headers)
    as_admin = client.put(url, json={'status': 'paid'}, headers=admin_headers)

    assert anonymous.status_code == 401
    assert as_club.status_code == 403
    assert as_admin.status_code == 200
    assert as_admin.get_json()['data']['status'] == 'paid'


def test_concurrent_duplicate_registrations_admit_one(tmp_path):
    """Two simultaneous submissions with the same email: one wins, the other gets 409"""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'race.db'}", slow_query_threshold_ms=1000)
    app = create_app('testing', db_manager=manager, UPLOAD_FOLDER=str(tmp_path / 'uploads'))
    barrier = threading.Barrier(2)
    statuses = []
    lock = threading.Lock()

    def submit(phone):
        client = app.test_client()
        barrier.wait()
        response = register(client, phone=phone)
        with lock:
            statuses.append(response.status_code)

    threads = [threading.Thread(target=submit, args=(phone,))
               for phone in ('081111111111', '082222222222')]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(statuses) == [201, 409]
    with manager.session_scope() as session:
        assert session.scalar(select(func.count()).select_from(PublicKejurkab)) == 1
    manager.dispose()
