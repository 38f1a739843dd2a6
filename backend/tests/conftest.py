"""
Pytest fixtures for shiftbook backend tests.

Provides an in-memory database, the seeded catalog, an operator with a
bearer token, and a recorder for change notifications.
"""

import pytest

from shiftbook import create_app
from shiftbook.extensions import db
from shiftbook.events import get_change_feed
from shiftbook.services import catalog_service, shift_service
from shiftbook.services.auth_service import create_user


OPERATOR_PASSWORD = "Morning123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'COMMIT_RETRY_BACKOFF': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh database for each test."""
    db.session.remove()
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def catalog(db_session):
    """The 31-item default catalog."""
    catalog_service.seed_default_catalog()
    return catalog_service.list_items()


@pytest.fixture(scope='function')
def operator(db_session):
    """Operator account; low bcrypt cost keeps the suite fast."""
    return create_user("baker", OPERATOR_PASSWORD, display_name="Morning Baker", rounds=4)


@pytest.fixture(scope='function')
def open_shift(catalog):
    """An OPEN shift over the default catalog."""
    return shift_service.start_shift()


@pytest.fixture(scope='function')
def auth_headers(client, operator):
    return auth_headers_for(client, operator.username, OPERATOR_PASSWORD)


@pytest.fixture(scope='function')
def events(app):
    """Records (event, payload) for every change published during the test."""
    received = []

    def listener(event, **payload):
        received.append((event, payload))

    unsubscribe = get_change_feed().subscribe(listener)
    yield received
    unsubscribe()


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers_for(client, username: str, password: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {get_auth_token(client, username, password)}'}
