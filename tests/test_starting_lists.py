import pytest


def base(event_id, list_id=None):
    url = f'/api/v1/events/{event_id}/starting-list'
    return f'{url}/{list_id}' if list_id else url


def add(client, headers, event_id, list_id, member_id, **extra):
    return client.post(f'{base(event_id, list_id)}/participants',
                       json={'member_id': member_id, **extra}, headers=headers)


def create_invoice(client, headers, club_id, event_id, list_id, member_id):
    body = {
        'event_id': event_id,
        'due_date': '2030-05-20T00:00:00',
        'items': [{'starting_list_id': list_id, 'member_id': member_id,
                   'description': 'Entry fee', 'quantity': 1, 'unit_price': 50000}],
    }
    response = client.post(f'/api/v1/clubs/{club_id}/invoices', json=body, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


@pytest.fixture
def event(make_event):
    return make_event()


@pytest.fixture
def club_id(club_account):
    return club_account[1]


def test_create_starting_list_starts_scheduled(event, make_starting_list):
    starting_list = make_starting_list(event['id'])

    assert starting_list['status'] == 'scheduled'
    assert starting_list['gender'] == 'male'


def test_create_requires_category(client, admin_headers, event):
    response = client.post(base(event['id']), json={'gender': 'female'}, headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'category'


def test_capacity_admits_exactly_n(client, admin_headers, event, club_id,
                                   make_starting_list, make_member):
    starting_list = make_starting_list(event['id'], max_participants=2)
    members = [make_member(club_id, name=f'Swimmer {i}') for i in range(3)]

    statuses = [add(client, admin_headers, event['id'], starting_list['id'], m).status_code
                for m in members]

    assert statuses == [201, 201, 400]
    listing = client.get(base(event['id'], starting_list['id']), headers=admin_headers)
    assert len(listing.get_json()['data']['participants']) == 2


def test_same_member_cannot_be_added_twice(client, admin_headers, event, club_id,
                                           make_starting_list, make_member):
    starting_list = make_starting_list(event['id'])
    member_id = make_member(club_id)

    first = add(client, admin_headers, event['id'], starting_list['id'], member_id)
    second = add(client, admin_headers, event['id'], starting_list['id'], member_id)

    assert first.status_code == 201
    assert second.status_code == 409


def test_unknown_member_is_404(client, admin_headers, event, make_starting_list):
    starting_list = make_starting_list(event['id'])

    response = add(client, admin_headers, event['id'], starting_list['id'], 999)

    assert response.status_code == 404


def test_list_of_another_event_is_404(client, admin_headers, make_event, make_starting_list):
    first = make_event(name='First')
    second = make_event(name='Second')
    starting_list = make_starting_list(first['id'])

    response = client.get(base(second['id'], starting_list['id']), headers=admin_headers)

    assert response.status_code == 404


def test_remove_participant_without_invoice_item(client, admin_headers, event, club_id,
                                                 make_starting_list, make_member):
    starting_list = make_starting_list(event['id'])
    participant = add(client, admin_headers, event['id'], starting_list['id'],
                      make_member(club_id)).get_json()['data']

    response = client.delete(f"{base(event['id'], starting_list['id'])}/participants",
                             json={'participantId': participant['id']}, headers=admin_headers)

    assert response.status_code == 200
    listing = client.get(base(event['id'], starting_list['id']), headers=admin_headers)
    assert listing.get_json()['data']['participants'] == []


def test_remove_participant_with_invoice_item_is_rejected(client, admin_headers, event, club_id,
                                                          make_starting_list, make_member):
    starting_list = make_starting_list(event['id'])
    member_id = make_member(club_id)
    participant = add(client, admin_headers, event['id'], starting_list['id'],
                      member_id).get_json()['data']
    create_invoice(client, admin_headers, club_id, event['id'], starting_list['id'], member_id)

    response = client.delete(f"{base(event['id'], starting_list['id'])}/participants",
                             json={'participantId': participant['id']}, headers=admin_headers)

    assert response.status_code == 400
    listing = client.get(base(event['id'], starting_list['id']), headers=admin_headers)
    assert len(listing.get_json()['data']['participants']) == 1


def test_remove_unknown_participant_is_404(client, admin_headers, event, make_starting_list):
    starting_list = make_starting_list(event['id'])

    response = client.delete(f"{base(event['id'], starting_list['id'])}/participants",
                             json={'participantId': 42}, headers=admin_headers)

    assert response.status_code == 404


def test_linked_invoice_blocks_list_and_event_deletion(client, admin_headers, event, club_id,
                                                       make_starting_list, make_member):
    starting_list = make_starting_list(event['id'])
    member_id = make_member(club_id)
    add(client, admin_headers, event['id'], starting_list['id'], member_id)
    create_invoice(client, admin_headers, club_id, event['id'], starting_list['id'], member_id)

    list_delete = client.delete(base(event['id'], starting_list['id']), headers=admin_headers)
    event_delete = client.delete(f"/api/v1/events/{event['id']}", headers=admin_headers)

    assert list_delete.status_code == 400
    assert event_delete.status_code == 400


def test_results_keep_values_not_supplied(client, official_headers, admin_headers, event, club_id,
                                          make_starting_list, make_member):
    starting_list = make_starting_list(event['id'])
    participant = add(client, admin_headers, event['id'], starting_list['id'],
                      make_member(club_id)).get_json()['data']
    url = f"{base(event['id'], starting_list['id'])}/results"

    client.put(url, json={'participantId': participant['id'], 'final_time': '2030-06-01T00:00:31.450000',
                          'position': 2}, headers=official_headers)
    response = client.put(url, json={'participantId': participant['id'], 'position': 1},
                          headers=official_headers)

    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['position'] == 1
    assert data['final_time'] == '2030-06-01T00:00:31.450000'


def test_club_account_cannot_record_results(client, club_headers, event, make_starting_list):
    starting_list = make_starting_list(event['id'])

    response = client.put(f"{base(event['id'], starting_list['id'])}/results",
                          json={'participantId': 1, 'position': 1}, headers=club_headers)

    assert response.status_code == 403


@pytest.mark.parametrize('path, expected', [
    (['in_progress'], [200]),
    (['completed'], [400]),
    (['in_progress', 'completed'], [200, 200]),
    (['in_progress', 'scheduled'], [200, 200]),
    (['in_progress', 'completed', 'scheduled'], [200, 200, 400]),
    (['in_progress', 'completed', 'in_progress'], [200, 200, 400]),
    (['in_progress', 'completed', 'completed'], [200, 200, 200]),
    (['scheduled'], [200]),
])
def test_status_transitions(client, official_headers, event, make_starting_list, path, expected):
    starting_list = make_starting_list(event['id'])
    url = f"{base(event['id'], starting_list['id'])}/status"

    statuses = [client.put(url, json={'status': s}, headers=official_headers).status_code
                for s in path]

    assert statuses == expected


def test_unknown_status_value_is_400(client, official_headers, event, make_starting_list):
    starting_list = make_starting_list(event['id'])

    response = client.put(f"{base(event['id'], starting_list['id'])}/status",
                          json={'status': 'finished'}, headers=official_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'status'


def test_general_update_follows_transition_table(client, admin_headers, event, make_starting_list):
    starting_list = make_starting_list(event['id'])
    url = base(event['id'], starting_list['id'])

    skipped = client.put(url, json={'status': 'completed'}, headers=admin_headers)
    renamed = client.put(url, json={'category': '100m backstroke'}, headers=admin_headers)

    assert skipped.status_code == 400
    assert renamed.status_code == 200
    data = renamed.get_json()['data']
    assert data['category'] == '100m backstroke'
    assert data['age_group'] == '12-14'
    assert data['status'] == 'scheduled'


def test_capacity_cannot_drop_below_current_count(client, admin_headers, event, club_id,
                                                  make_starting_list, make_member):
    starting_list = make_starting_list(event['id'], max_participants=4)
    for i in range(3):
        add(client, admin_headers, event['id'], starting_list['id'], make_member(club_id, name=f'S{i}'))

    response = client.put(base(event['id'], starting_list['id']),
                          json={'max_participants': 2}, headers=admin_headers)

    assert response.status_code == 400
