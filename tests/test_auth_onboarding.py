"""
Sign-up, sign-in, sign-out, role resolution and the three step onboarding flow.
"""
from sqlalchemy.exc import SQLAlchemyError

from livestock.models import AppRole
from livestock.utils import role_utils
from livestock.utils.role_utils import RoleResolver
from livestock.utils.session import SessionRegistry


class TestAccounts:
    def test_sign_up_grants_farmer_role(self, client):
        response = client.post('/api/auth/signup', json={
            'email': 'Ravi@Example.com', 'password': 'secret123', 'full_name': 'Ravi Kumar'
        })
        body = response.get_json()
        assert response.status_code == 201
        assert body['user']['email'] == 'ravi@example.com'
        assert body['user']['roles'] == ['farmer']
        assert body['user']['onboarding_completed'] is False
        assert body['access_token']

    def test_duplicate_email_is_rejected(self, client, register):
        register(email='dup@example.com')
        response = client.post('/api/auth/signup', json={
            'email': 'dup@example.com', 'password': 'secret123', 'full_name': 'Someone Else'
        })
        assert response.status_code == 400

    def test_short_password_fails_validation(self, client):
        response = client.post('/api/auth/signup', json={
            'email': 'a@example.com', 'password': '123', 'full_name': 'Short Password'
        })
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Validation Error'

    def test_sign_in_with_wrong_password(self, client, register):
        register(email='farmer@example.com')
        response = client.post('/api/auth/signin', json={'email': 'farmer@example.com', 'password': 'wrong'})
        assert response.status_code == 401

    def test_admin_sign_in_rejects_farmers(self, client, register):
        register(email='farmer@example.com')
        response = client.post('/api/auth/admin-signin', json={
            'email': 'farmer@example.com', 'password': 'secret123'
        })
        assert response.status_code == 403

    def test_sign_out_revokes_the_token(self, client, register, headers_for):
        _, token = register()
        headers = headers_for(token)
        assert client.get('/api/auth/session', headers=headers).status_code == 200
        assert client.post('/api/auth/signout', headers=headers).status_code == 200
        assert client.get('/api/auth/session', headers=headers).status_code == 401

    def test_missing_token_is_401(self, client):
        assert client.get('/api/auth/session').status_code == 401


class TestRoleResolution:
    def test_roles_are_cached_per_session(self, app, register):
        user_id, _ = register()
        registry = SessionRegistry()
        with app.app_context():
            roles = RoleResolver(registry).resolve(user_id, 'session-1')
        assert roles == frozenset({AppRole.FARMER})
        assert registry.cached_roles('session-1') == roles

    def test_lookup_failure_resolves_to_no_roles(self, app, register, monkeypatch):
        user_id, _ = register()

        class BrokenQuery:
            def filter_by(self, **kwargs):
                raise SQLAlchemyError('connection lost')

        class BrokenUserRole:
            query = BrokenQuery()

        monkeypatch.setattr(role_utils, 'UserRole', BrokenUserRole)
        registry = SessionRegistry()
        with app.app_context():
            assert RoleResolver(registry).resolve(user_id, 'session-1') == frozenset()
        assert registry.cached_roles('session-1') is None

    def test_granted_role_is_visible_after_eviction(self, client, register, give_role, headers_for):
        user_id, token = register()
        headers = headers_for(token)
        assert client.get('/api/admin/overview', headers=headers).status_code == 403
        give_role(user_id, 'admin')
        assert client.get('/api/admin/overview', headers=headers).status_code == 200


class TestOnboarding:
    def test_status_walks_through_the_steps(self, client, register, plan_id, headers_for):
        _, token = register()
        headers = headers_for(token)
        assert client.get('/api/onboarding/status', headers=headers).get_json()['step'] == 1

        client.put('/api/onboarding/profile', headers=headers, json={
            'full_name': 'Test Farmer', 'phone_number': '9876543210'
        })
        assert client.get('/api/onboarding/status', headers=headers).get_json()['step'] == 2

        client.post('/api/onboarding/subscription', headers=headers, json={'plan_id': plan_id})
        assert client.get('/api/onboarding/status', headers=headers).get_json()['step'] == 3

        client.post('/api/onboarding/complete', headers=headers)
        status = client.get('/api/onboarding/status', headers=headers).get_json()
        assert status == {'onboarding_completed': True, 'step': None}

    def test_profile_step_requires_valid_phone(self, client, register, headers_for):
        _, token = register()
        response = client.put('/api/onboarding/profile', headers=headers_for(token), json={
            'full_name': 'Test Farmer', 'phone_number': '12345'
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Phone number must be exactly 10 digits'

    def test_unknown_plan_is_404(self, client, register, headers_for):
        _, token = register()
        response = client.post('/api/onboarding/subscription', headers=headers_for(token),
                               json={'plan_id': 'missing'})
        assert response.status_code == 404

    def test_pages_redirect_until_onboarding_completes(self, client, register, onboard, headers_for):
        _, token = register()
        headers = headers_for(token)

        response = client.get('/animals', headers=headers)
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/onboarding')
        assert client.get('/onboarding', headers=headers).status_code == 200

        onboard(token)

        assert client.get('/animals', headers=headers).status_code == 200
        response = client.get('/onboarding', headers=headers)
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/dashboard')


class TestEmergencyContacts:
    def contact(self, n=1, **extra):
        return {'contact_name': f'Contact {n}', 'contact_number': f'98765432{n:02d}', **extra}

    def test_number_is_required(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/emergency-contacts', headers=headers, json={'contact_name': 'Ramesh'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Contact number is required'

    def test_short_number_fails(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/emergency-contacts', headers=headers,
                               json={'contact_name': 'Ramesh', 'contact_number': '98765'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Phone number must be exactly 10 digits'

    def test_at_most_five_contacts(self, client, farmer):
        _, headers = farmer
        for n in range(5):
            assert client.post('/api/emergency-contacts', headers=headers, json=self.contact(n)).status_code == 201
        response = client.post('/api/emergency-contacts', headers=headers, json=self.contact(5))
        assert response.status_code == 400
        assert response.get_json()['message'] == 'You can only add up to 5 emergency contacts'
        assert len(client.get('/api/emergency-contacts', headers=headers).get_json()) == 5

    def test_single_default_contact(self, client, farmer):
        _, headers = farmer
        first = client.post('/api/emergency-contacts', headers=headers,
                            json=self.contact(1, is_default=True)).get_json()
        second = client.post('/api/emergency-contacts', headers=headers, json=self.contact(2)).get_json()
        response = client.put(f"/api/emergency-contacts/{second['id']}", headers=headers, json={'is_default': True})
        assert response.status_code == 200
        assert response.get_json()['contact_name'] == 'Contact 2'

        contacts = {c['id']: c for c in client.get('/api/emergency-contacts', headers=headers).get_json()}
        assert contacts[second['id']]['is_default'] is True
        assert contacts[first['id']]['is_default'] is False

    def test_only_owner_may_edit_or_delete(self, client, farmer, register, headers_for):
        _, headers = farmer
        created = client.post('/api/emergency-contacts', headers=headers, json=self.contact()).get_json()
        _, token = register()
        other = headers_for(token)
        assert client.put(f"/api/emergency-contacts/{created['id']}", headers=other,
                          json={'contact_name': 'Stranger'}).status_code == 404
        assert client.delete(f"/api/emergency-contacts/{created['id']}", headers=other).status_code == 404

        assert client.delete(f"/api/emergency-contacts/{created['id']}", headers=headers).status_code == 200
        assert client.get('/api/emergency-contacts', headers=headers).get_json() == []
