"""
Shared pytest fixtures: a fresh in-memory app per test plus account helpers.
"""
import pytest

from livestock import create_app, db
from livestock.config import TestConfig
from livestock.models import SubscriptionPlan
from livestock.utils.role_utils import grant_role


@pytest.fixture
def app(tmp_path):
    class Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / 'uploads')

    app = create_app(Config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Client without cookies; authenticate with ``auth_headers``."""
    return app.test_client()


def auth_headers(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def register(app):
    """Sign up a farmer and return ``(user_id, token)``.

    Sign-up runs on its own client so the JWT cookie never leaks into ``client``.
    """
    counter = {'n': 0}

    def _register(email=None, password='secret123', full_name='Test Farmer'):
        counter['n'] += 1
        email = email or f"user{counter['n']}@example.com"
        response = app.test_client().post('/api/auth/signup', json={
            'email': email, 'password': password, 'full_name': full_name
        })
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        return body['user']['id'], body['access_token']
    return _register


@pytest.fixture
def give_role(app):
    """Grant a role and drop the cached role sets of that user's sessions."""
    def _give_role(user_id, role):
        with app.app_context():
            roles, error = grant_role(user_id, role)
        assert error is None
        app.extensions['session_registry'].evict_user_roles(user_id)
        return roles
    return _give_role


@pytest.fixture
def plan_id(app):
    with app.app_context():
        plan = SubscriptionPlan(name='Free', price=0, duration_months=1, features=['Animal registry'])
        db.session.add(plan)
        db.session.commit()
        return plan.id


@pytest.fixture
def onboard(client, plan_id):
    """Run the three onboarding steps for a token."""
    def _onboard(token):
        headers = auth_headers(token)
        response = client.put('/api/onboarding/profile', headers=headers, json={
            'full_name': 'Test Farmer', 'phone_number': '9876543210', 'state': 'Punjab'
        })
        assert response.status_code == 200, response.get_json()
        response = client.post('/api/onboarding/subscription', headers=headers, json={'plan_id': plan_id})
        assert response.status_code == 201, response.get_json()
        response = client.post('/api/onboarding/complete', headers=headers)
        assert response.status_code == 200, response.get_json()
    return _onboard


@pytest.fixture
def farmer(register, onboard):
    """An onboarded farmer: ``(user_id, headers)``."""
    user_id, token = register()
    onboard(token)
    return user_id, auth_headers(token)


@pytest.fixture
def admin(register, give_role, onboard):
    """Signed-up accounts start as farmers, so the admin is onboarded too."""
    user_id, token = register(full_name='Site Admin')
    onboard(token)
    give_role(user_id, 'admin')
    return user_id, auth_headers(token)
