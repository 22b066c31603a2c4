from sqlalchemy import select

from models import ClubMember, EventRegistration, Invoice, RegistrationStatus


def seed_club_activity(client, admin_headers, club_id, make_event, make_starting_list, make_member,
                       db_manager):
    """One member, one registration and one invoice for the club"""
    event = make_event()
    starting_list = make_starting_list(event['id'])
    member_id = make_member(club_id)
    client.post(f"/api/v1/events/{event['id']}/starting-list/{starting_list['id']}/participants",
                json={'member_id': member_id}, headers=admin_headers)
    with db_manager.session_scope() as session:
        session.add(EventRegistration(event_id=event['id'], club_id=club_id,
                                      status=RegistrationStatus.CONFIRMED))
    body = {
        'event_id': event['id'],
        'due_date': '2030-05-20T00:00:00',
        'items': [{'starting_list_id': starting_list['id'], 'member_id': member_id,
                   'description': 'Entry fee', 'quantity': 1, 'unit_price': 50000}],
    }
    response = client.post(f'/api/v1/clubs/{club_id}/invoices', json=body, headers=admin_headers)
    assert response.status_code == 201
    return member_id


def club_state(db_manager, club_id):
    with db_manager.session_scope() as session:
        members = session.scalars(select(ClubMember.active).where(ClubMember.club_id == club_id)).all()
        registrations = session.scalars(
            select(EventRegistration.status).where(EventRegistration.club_id == club_id)).all()
        invoices = session.scalars(select(Invoice.status).where(Invoice.club_id == club_id)).all()
        return (list(members), [r.value for r in registrations], [i.value for i in invoices])


def test_list_clubs_with_search(client, admin_headers, club_account, app, db_manager):
    with app.app_context():
        db_manager.register_user('hiu@example.com', 'hiu_biru', 'secret123')

    everything = client.get('/api/v1/clubs', headers=admin_headers).get_json()
    found = client.get('/api/v1/clubs?search=HIU', headers=admin_headers).get_json()

    assert everything['total'] == 2
    assert [c['name'] for c in found['paginatedData']] == ['hiu_biru']
    assert found['paginatedData'][0]['member_count'] == 0


def test_get_club_includes_members_and_invoices(client, admin_headers, club_account, make_event,
                                                make_starting_list, make_member, db_manager):
    club_id = club_account[1]
    seed_club_activity(client, admin_headers, club_id, make_event, make_starting_list,
                       make_member, db_manager)

    club = client.get(f'/api/v1/clubs/{club_id}', headers=admin_headers).get_json()['data']

    assert len(club['members']) == 1
    assert len(club['event_registrations']) == 1
    assert len(club['invoices']) == 1


def test_update_club_contact(client, club_headers, club_account):
    club_id = club_account[1]

    response = client.put(f'/api/v1/clubs/{club_id}',
                          json={'email': 'info@tirta.id', 'phone': '+62 812-3456-7890'},
                          headers=club_headers)

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['email'] == 'info@tirta.id'
    assert data['phone'] == '+6281234567890'


def test_update_club_rejects_contact_held_by_another_club(client, admin_headers, club_account,
                                                          app, db_manager):
    with app.app_context():
        other = db_manager.register_user('hiu@example.com', 'hiu_biru', 'secret123')
    client.put(f"/api/v1/clubs/{other['club']['id']}", json={'phone': '081234567890'},
               headers=admin_headers)

    response = client.put(f'/api/v1/clubs/{club_account[1]}', json={'phone': '081234567890'},
                          headers=admin_headers)

    assert response.status_code == 409


def test_update_club_may_keep_its_own_contact(client, admin_headers, club_account):
    url = f'/api/v1/clubs/{club_account[1]}'
    client.put(url, json={'phone': '081234567890'}, headers=admin_headers)

    response = client.put(url, json={'phone': '081234567890', 'name': 'Tirta Jaya'},
                          headers=admin_headers)

    assert response.status_code == 200


def test_club_account_cannot_update_another_club(client, club_headers, app, db_manager):
    with app.app_context():
        other = db_manager.register_user('hiu@example.com', 'hiu_biru', 'secret123')

    response = client.put(f"/api/v1/clubs/{other['club']['id']}", json={'name': 'Taken over'},
                          headers=club_headers)

    assert response.status_code == 403


def test_soft_delete_cascades(client, admin_headers, club_account, make_event,
                              make_starting_list, make_member, db_manager):
    club_id = club_account[1]
    seed_club_activity(client, admin_headers, club_id, make_event, make_starting_list,
                       make_member, db_manager)

    response = client.delete(f'/api/v1/clubs/{club_id}', headers=admin_headers)

    assert response.status_code == 200
    assert club_state(db_manager, club_id) == ([False], ['canceled'], ['canceled'])
    assert client.get(f'/api/v1/clubs/{club_id}', headers=admin_headers).status_code == 404
    listing = client.get('/api/v1/clubs', headers=admin_headers).get_json()
    assert club_id not in [c['id'] for c in listing['paginatedData']]
    assert client.delete(f'/api/v1/clubs/{club_id}', headers=admin_headers).status_code == 404


def test_soft_delete_rolls_back_when_a_step_fails(client, admin_headers, club_account, make_event,
                                                  make_starting_list, make_member, db_manager,
                                                  monkeypatch):
    club_id = club_account[1]
    seed_club_activity(client, admin_headers, club_id, make_event, make_starting_list,
                       make_member, db_manager)

    def fail(session, club_id):
        raise RuntimeError('storage went away')

    monkeypatch.setattr(db_manager, '_cancel_club_invoices', fail)

    response = client.delete(f'/api/v1/clubs/{club_id}', headers=admin_headers)

    assert response.status_code == 500
    assert response.get_json() == {'responseCode': 500, 'message': 'Internal server error'}
    assert club_state(db_manager, club_id) == ([True], ['confirmed'], ['draft'])
    assert client.get(f'/api/v1/clubs/{club_id}', headers=admin_headers).status_code == 200


def test_only_admin_deletes_clubs(client, club_headers, club_account):
    response = client.delete(f'/api/v1/clubs/{club_account[1]}', headers=club_headers)

    assert response.status_code == 403
