"""
Route gating, the onboarding gate and the page route table.
"""
from livestock.models import AppRole
from livestock.routes.page_routes import protected, public, ROUTES_BY_NAME
from livestock.utils.gating import (
    check_route_access, resolve_page_access, GateState, OnboardingGate, OnboardingLookupError,
    OnboardingState, ALLOW, LOADING
)

FARMER = frozenset({AppRole.FARMER})
ADMIN = frozenset({AppRole.ADMIN})


class FakeSession:
    def __init__(self, user_id=None, roles=frozenset()):
        self.user_id = user_id
        self.roles = roles

    @property
    def is_authenticated(self):
        return self.user_id is not None


def gate_with(flag):
    def fetch_flag(user_id):
        if isinstance(flag, Exception):
            raise flag
        return flag
    return OnboardingGate(fetch_flag)


class TestCheckRouteAccess:
    def test_no_role_requirement_allows_any_signed_in_user(self):
        assert check_route_access(None, FARMER) == ALLOW

    def test_matching_role_allows(self):
        assert check_route_access([AppRole.VETERINARY_OFFICER, AppRole.ADMIN], ADMIN) == ALLOW

    def test_missing_role_redirects_to_dashboard(self):
        decision = check_route_access([AppRole.ADMIN], FARMER)
        assert decision.state is GateState.REDIRECT
        assert decision.location == '/dashboard'

    def test_custom_redirect_path(self):
        decision = check_route_access([AppRole.ADMIN], FARMER, redirect_path='/animals')
        assert decision.location == '/animals'

    def test_empty_role_set_is_denied(self):
        assert check_route_access([AppRole.FARMER], frozenset()).state is GateState.REDIRECT

    def test_loading_roles_never_decide(self):
        assert check_route_access([AppRole.ADMIN], frozenset(), roles_loading=True) == LOADING


class TestOnboardingGate:
    def test_farmer_without_completed_onboarding_is_blocked(self):
        assert gate_with(False).evaluate('/animals', 'u1', FARMER) is OnboardingState.BLOCKED

    def test_missing_profile_blocks(self):
        assert gate_with(None).evaluate('/animals', 'u1', FARMER) is OnboardingState.BLOCKED

    def test_completed_onboarding_clears(self):
        assert gate_with(True).evaluate('/animals', 'u1', FARMER) is OnboardingState.CLEAR

    def test_onboarding_page_itself_is_never_blocked(self):
        assert gate_with(False).evaluate('/onboarding', 'u1', FARMER) is OnboardingState.CLEAR

    def test_non_farmers_are_not_gated(self):
        assert gate_with(False).evaluate('/admin', 'u1', ADMIN) is OnboardingState.CLEAR

    def test_lookup_failure_lets_the_user_through(self):
        gate = gate_with(OnboardingLookupError('database unavailable'))
        assert gate.evaluate('/animals', 'u1', FARMER) is OnboardingState.CLEAR

    def test_checking_while_roles_load(self):
        assert gate_with(False).evaluate('/animals', 'u1', FARMER, roles_loading=True) is OnboardingState.CHECKING


class TestResolvePageAccess:
    def test_public_page_allows_anonymous(self):
        route = public('/faq', 'faq', None)
        assert resolve_page_access(route, '/faq', FakeSession(), gate_with(False)) == ALLOW

    def test_anonymous_user_is_sent_to_sign_in(self):
        route = protected('/animals', 'animals', None)
        decision = resolve_page_access(route, '/animals', FakeSession(), gate_with(True))
        assert decision.location == '/auth'

    def test_role_gate_runs_before_onboarding(self):
        route = protected('/admin', 'admin', None, [AppRole.ADMIN])
        decision = resolve_page_access(route, '/admin', FakeSession('u1', FARMER), gate_with(False))
        assert decision.location == '/dashboard'

    def test_unfinished_onboarding_redirects_farmer(self):
        route = protected('/animals', 'animals', None)
        decision = resolve_page_access(route, '/animals', FakeSession('u1', FARMER), gate_with(False))
        assert decision.state is GateState.REDIRECT
        assert decision.location == '/onboarding'

    def test_table_role_requirements(self):
        assert ROUTES_BY_NAME['admin_users'].allowed_roles == (AppRole.ADMIN,)
        assert AppRole.VETERINARY_OFFICER in ROUTES_BY_NAME['veterinary_dashboard'].allowed_roles
        assert AppRole.PROGRAM_COORDINATOR in ROUTES_BY_NAME['coordinator_dashboard'].allowed_roles
        assert ROUTES_BY_NAME['faq'].public
        assert not ROUTES_BY_NAME['dashboard'].public


class TestPages:
    def test_public_page_renders_without_session(self, client):
        response = client.get('/faq')
        assert response.status_code == 200
        assert response.get_json()['page'] == 'faq'

    def test_protected_page_redirects_anonymous_to_auth(self, client):
        response = client.get('/animals')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/auth')

    def test_non_admin_is_redirected_from_admin(self, client, farmer):
        _, headers = farmer
        response = client.get('/admin', headers=headers)
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/dashboard')

    def test_admin_reaches_admin_page(self, client, admin):
        _, headers = admin
        response = client.get('/admin', headers=headers)
        assert response.status_code == 200
        assert 'total_users' in response.get_json()['data']

    def test_admin_loads_every_page(self, client, admin):
        _, headers = admin
        for route in ROUTES_BY_NAME.values():
            if '<' in route.path or route.name == 'onboarding':
                continue
            response = client.get(route.path, headers=headers)
            assert response.status_code == 200, route.path
            assert response.get_json()['page'] == route.name

    def test_emergency_page_lists_own_contacts(self, client, farmer):
        _, headers = farmer
        client.post('/api/emergency-contacts', headers=headers, json={
            'contact_name': 'Dr. Mehta', 'contact_number': '9812345678', 'relationship': 'Veterinarian'
        })
        data = client.get('/emergency', headers=headers).get_json()['data']
        assert [c['contact_name'] for c in data['contacts']] == ['Dr. Mehta']
        assert data['max_contacts'] == 5

    def test_subscriptions_page_is_admin_only(self, client, farmer):
        _, headers = farmer
        response = client.get('/admin/subscriptions', headers=headers)
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/dashboard')

    def test_vet_dashboard_needs_vet_role(self, client, farmer, give_role):
        user_id, headers = farmer
        assert client.get('/veterinary-dashboard', headers=headers).status_code == 302
        give_role(user_id, 'veterinary_officer')
        assert client.get('/veterinary-dashboard', headers=headers).status_code == 200

    def test_unknown_record_is_404(self, client, farmer):
        _, headers = farmer
        response = client.get('/animals/does-not-exist', headers=headers)
        assert response.status_code == 404

    def test_demo_login_closed_in_production(self, client, app):
        assert client.get('/demo-login').status_code == 200
        app.config['APP_ENV'] = 'production'
        response = client.get('/demo-login')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/')


class TestNavigationResolve:
    def test_reports_redirect_for_non_admin(self, client, farmer):
        _, headers = farmer
        response = client.get('/api/navigation/resolve?path=/admin/users', headers=headers)
        body = response.get_json()
        assert response.status_code == 200
        assert body['page'] == 'admin_users'
        assert body['decision'] == 'redirect'
        assert body['location'] == '/dashboard'

    def test_reports_allow_with_url_arguments(self, client, farmer):
        _, headers = farmer
        body = client.get('/api/navigation/resolve?path=/helpdesk/abc', headers=headers).get_json()
        assert body['page'] == 'ticket_detail'
        assert body['decision'] == 'allow'

    def test_unknown_path_is_404(self, client):
        assert client.get('/api/navigation/resolve?path=/nowhere').status_code == 404
