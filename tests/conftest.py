from datetime import datetime, timedelta

import pytest

from app import create_app
from database import DatabaseManager
from models import ClubMember, ClubMemberCategory, UserRole

ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'admin123'


def auth_header(token):
    return {'Authorization': f'Bearer {token}'}


def login(client, identity, password):
    response = client.post('/api/v1/auth/login',
                           json={'emailOrUsername': identity, 'password': password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()['data']['token']


@pytest.fixture
def db_manager():
    manager = DatabaseManager('sqlite://', slow_query_threshold_ms=1000)
    yield manager
    manager.dispose()


@pytest.fixture
def app(db_manager, tmp_path):
    app = create_app(
        'testing',
        db_manager=db_manager,
        UPLOAD_FOLDER=str(tmp_path / 'uploads'),
        DEFAULT_ADMIN_USERNAME=ADMIN_USERNAME,
        DEFAULT_ADMIN_PASSWORD=ADMIN_PASSWORD,
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(client):
    return auth_header(login(client, ADMIN_USERNAME, ADMIN_PASSWORD))


@pytest.fixture
def club_account(app, db_manager):
    """A registered club user: (user dict, club id, password)"""
    with app.app_context():
        user = db_manager.register_user('tirta@example.com', 'tirta', 'secret123')
    return user, user['club']['id'], 'secret123'


@pytest.fixture
def club_headers(client, club_account):
    user, _, password = club_account
    return auth_header(login(client, user['username'], password))


@pytest.fixture
def official_headers(app, client, db_manager):
    with app.app_context():
        db_manager.register_user('wasit@example.com', 'wasit', 'secret123', role=UserRole.OFFICIAL)
    return auth_header(login(client, 'wasit', 'secret123'))


@pytest.fixture
def make_event(client, admin_headers):
    def _make_event(**overrides):
        start = datetime(2030, 6, 1, 8, 0)
        body = {
            'name': 'Kejurkab Renang 2030',
            'location': 'Kolam Renang Tirta Kencana',
            'startDate': start.isoformat(),
            'endDate': (start + timedelta(days=2)).isoformat(),
            'registrationDeadline': (start - timedelta(days=14)).isoformat(),
            'status': 'open',
        }
        body.update(overrides)
        response = client.post('/api/v1/events', json=body, headers=admin_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()['data']
    return _make_event


@pytest.fixture
def make_starting_list(client, admin_headers):
    def _make_starting_list(event_id, **overrides):
        body = {'category': '50m freestyle', 'age_group': '12-14', 'gender': 'male'}
        body.update(overrides)
        response = client.post(f'/api/v1/events/{event_id}/starting-list',
                               json=body, headers=admin_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()['data']
    return _make_starting_list


@pytest.fixture
def make_member(db_manager):
    def _make_member(club_id, name='Budi Santoso', date_of_birth=None):
        with db_manager.session_scope() as session:
            member = ClubMember(
                club_id=club_id,
                name=name,
                date_of_birth=date_of_birth,
                category=ClubMemberCategory.ACHIEVING,
            )
            session.add(member)
            session.flush()
            return member.id
    return _make_member
