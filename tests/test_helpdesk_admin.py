"""
Helpdesk tickets and SLA, admin user management and audited impersonation.
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from livestock import db
from livestock.models import HelpdeskTicket, TicketPriority, TicketStatus, UserActivityLog
from livestock.models.base_model import utcnow
from livestock.services import helpdesk_service

NOW = datetime(2024, 6, 1, 12, 0)


@pytest.fixture
def ticket(client, farmer):
    _, headers = farmer
    response = client.post('/api/helpdesk/tickets', headers=headers, json={
        'subject': 'Cannot add vaccination', 'description': 'The form keeps failing on save.',
        'priority': 'high'
    })
    assert response.status_code == 201
    return response.get_json()


class TestSlaRules:
    def configs(self):
        return {TicketPriority.HIGH: SimpleNamespace(resolution_time_hours=24)}

    def open_ticket(self, hours_old, status=TicketStatus.OPEN):
        return SimpleNamespace(status=status, priority=TicketPriority.HIGH,
                               created_at=NOW - timedelta(hours=hours_old))

    def test_open_past_resolution_window_is_breached(self):
        assert helpdesk_service.evaluate_sla_breach(self.open_ticket(25), self.configs(), NOW)

    def test_within_window(self):
        assert not helpdesk_service.evaluate_sla_breach(self.open_ticket(23), self.configs(), NOW)

    def test_resolved_tickets_never_breach(self):
        ticket = self.open_ticket(100, TicketStatus.RESOLVED)
        assert not helpdesk_service.evaluate_sla_breach(ticket, self.configs(), NOW)

    def test_no_config_for_priority(self):
        assert not helpdesk_service.evaluate_sla_breach(self.open_ticket(100), {}, NOW)

    def test_status_changes_stamp_resolved_at(self):
        ticket = SimpleNamespace(status=TicketStatus.OPEN, resolved_at=None)
        helpdesk_service.set_status(ticket, TicketStatus.RESOLVED, now=NOW)
        assert ticket.resolved_at == NOW
        helpdesk_service.set_status(ticket, TicketStatus.CLOSED, now=NOW + timedelta(hours=1))
        assert ticket.resolved_at == NOW
        helpdesk_service.set_status(ticket, TicketStatus.IN_PROGRESS)
        assert ticket.resolved_at is None


class TestTickets:
    def test_short_subject_fails(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/helpdesk/tickets', headers=headers, json={
            'subject': 'Help', 'description': 'Something is broken here.'
        })
        assert response.status_code == 400

    def test_owner_sees_ticket_others_do_not(self, client, ticket, farmer, register, headers_for):
        _, headers = farmer
        assert client.get(f"/api/helpdesk/tickets/{ticket['id']}", headers=headers).status_code == 200
        _, token = register()
        assert client.get(f"/api/helpdesk/tickets/{ticket['id']}", headers=headers_for(token)).status_code == 403

    def test_internal_notes_are_hidden_from_owner(self, client, ticket, farmer, admin):
        _, owner_headers = farmer
        _, admin_headers = admin
        client.post(f"/api/admin/tickets/{ticket['id']}/responses", headers=admin_headers,
                    json={'message': 'Looks like a date bug', 'is_internal_note': True})
        client.post(f"/api/admin/tickets/{ticket['id']}/responses", headers=admin_headers,
                    json={'message': 'We are looking into it'})

        owner_view = client.get(f"/api/helpdesk/tickets/{ticket['id']}", headers=owner_headers).get_json()
        assert [r['message'] for r in owner_view['responses']] == ['We are looking into it']

    def test_admin_resolves_and_reopens(self, client, ticket, admin):
        _, headers = admin
        resolved = client.put(f"/api/admin/tickets/{ticket['id']}", headers=headers,
                              json={'status': 'resolved'}).get_json()
        assert resolved['status'] == 'resolved'
        assert resolved['resolved_at'] is not None

        reopened = client.put(f"/api/admin/tickets/{ticket['id']}", headers=headers,
                              json={'status': 'open'}).get_json()
        assert reopened['resolved_at'] is None
        assert reopened['priority'] == 'high'

    def test_closed_ticket_takes_no_replies(self, client, ticket, farmer, admin):
        _, admin_headers = admin
        client.put(f"/api/admin/tickets/{ticket['id']}", headers=admin_headers, json={'status': 'closed'})
        _, headers = farmer
        response = client.post(f"/api/helpdesk/tickets/{ticket['id']}/responses", headers=headers,
                               json={'message': 'Any update?'})
        assert response.status_code == 400

    def test_sla_sweep_flags_old_tickets(self, app, ticket):
        with app.app_context():
            helpdesk_service.seed_sla_defaults()
            row = db.session.get(HelpdeskTicket, ticket['id'])
            row.created_at = utcnow() - timedelta(hours=30)
            db.session.commit()
            assert helpdesk_service.check_sla_breaches() == 1
            assert db.session.get(HelpdeskTicket, ticket['id']).sla_breach is True
            assert helpdesk_service.check_sla_breaches() == 0

    def test_sla_update_validation(self, client, admin):
        _, headers = admin
        response = client.put('/api/admin/sla/high', headers=headers,
                              json={'response_time_hours': 10, 'resolution_time_hours': 5})
        assert response.status_code == 400
        response = client.put('/api/admin/sla/urgent', headers=headers,
                              json={'response_time_hours': 1, 'resolution_time_hours': 5})
        assert response.status_code == 400
        response = client.put('/api/admin/sla/high', headers=headers,
                              json={'response_time_hours': 2, 'resolution_time_hours': 12})
        assert response.status_code == 200
        assert response.get_json()['resolution_time_hours'] == 12


class TestUserManagement:
    def test_grant_and_revoke_role(self, client, admin, register, headers_for):
        _, admin_headers = admin
        user_id, token = register()
        headers = headers_for(token)
        assert client.get('/api/vet/dashboard', headers=headers).status_code == 403

        response = client.post(f'/api/admin/users/{user_id}/roles', headers=admin_headers,
                               json={'role': 'veterinary_officer'})
        assert response.get_json()['roles'] == ['farmer', 'veterinary_officer']
        assert client.get('/api/vet/dashboard', headers=headers).status_code == 200

        client.delete(f'/api/admin/users/{user_id}/roles/veterinary_officer', headers=admin_headers)
        assert client.get('/api/vet/dashboard', headers=headers).status_code == 403

    def test_invalid_role(self, client, admin, register):
        _, admin_headers = admin
        user_id, _ = register()
        response = client.post(f'/api/admin/users/{user_id}/roles', headers=admin_headers, json={'role': 'owner'})
        assert response.status_code == 400

    def test_admin_cannot_drop_own_admin_role(self, client, admin):
        user_id, headers = admin
        response = client.delete(f'/api/admin/users/{user_id}/roles/admin', headers=headers)
        assert response.status_code == 400

    @pytest.mark.parametrize('spelling', ['ADMIN', 'Admin'])
    def test_own_admin_role_guard_ignores_case(self, client, admin, spelling):
        user_id, headers = admin
        response = client.delete(f'/api/admin/users/{user_id}/roles/{spelling}', headers=headers)
        assert response.status_code == 400
        assert response.get_json()['message'] == 'You cannot revoke your own admin role'
        assert client.get('/api/admin/overview', headers=headers).status_code == 200


class TestImpersonation:
    def test_function_records_start_and_stop(self, app, client, admin, register):
        admin_id, headers = admin
        target_id, _ = register()
        for action in ('start', 'stop'):
            response = client.post('/api/functions/impersonate-user', headers=headers,
                                   json={'targetUserId': target_id, 'action': action})
            body = response.get_json()
            assert response.status_code == 200
            assert body['success'] is True
            assert body['action'] == action
            assert body['admin_user_id'] == admin_id

        with app.app_context():
            types = [row.activity_type for row in UserActivityLog.query.filter_by(
                user_id=admin_id, feature_name='admin_impersonation').all()]
        assert sorted(types) == ['impersonation_started', 'impersonation_stopped']

    def test_non_admin_is_rejected(self, client, farmer, register):
        _, headers = farmer
        target_id, _ = register()
        response = client.post('/api/functions/impersonate-user', headers=headers,
                               json={'targetUserId': target_id, 'action': 'start'})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'User does not have admin privileges'}

    @pytest.mark.parametrize('payload, message', [
        ({'action': 'start'}, 'Target user ID is required'),
        ({'targetUserId': 'someone', 'action': 'pause'}, 'Invalid action. Use "start" or "stop"'),
        ({'targetUserId': 'missing', 'action': 'start'}, 'Target user not found'),
    ])
    def test_bad_requests(self, client, admin, payload, message):
        _, headers = admin
        response = client.post('/api/functions/impersonate-user', headers=headers, json=payload)
        assert response.status_code == 400
        assert response.get_json()['error'] == message

    def test_activity_log_since_filter(self, client, admin, register):
        _, headers = admin
        target_id, _ = register()
        client.post('/api/functions/impersonate-user', headers=headers,
                    json={'targetUserId': target_id, 'action': 'start'})

        entries = client.get('/api/admin/activity?since=2000-01-01T00:00:00Z', headers=headers).get_json()
        assert 'impersonation_started' in [e['activity_type'] for e in entries]
        assert client.get('/api/admin/activity?since=2999-01-01', headers=headers).get_json() == []
        assert client.get('/api/admin/activity?since=yesterday', headers=headers).status_code == 400

    def test_session_display_state(self, client, admin, register):
        _, headers = admin
        target_id, _ = register()
        response = client.post('/api/auth/impersonation', headers=headers, json={'target_user_id': target_id})
        assert response.status_code == 200
        assert client.get('/api/auth/session', headers=headers).get_json()['impersonating'] == target_id

        client.delete('/api/auth/impersonation', headers=headers)
        assert client.get('/api/auth/session', headers=headers).get_json()['impersonating'] is None

    def test_failed_start_keeps_session_unchanged(self, client, admin):
        _, headers = admin
        response = client.post('/api/auth/impersonation', headers=headers, json={'target_user_id': 'missing'})
        assert response.status_code == 400
        assert client.get('/api/auth/session', headers=headers).get_json()['impersonating'] is None

    def test_sign_out_clears_impersonation(self, app, client, admin, register):
        _, headers = admin
        target_id, _ = register()
        client.post('/api/auth/impersonation', headers=headers, json={'target_user_id': target_id})
        client.post('/api/auth/signout', headers=headers)
        registry = app.extensions['session_registry']
        assert registry._impersonation == {}


class TestSubscriptionPlans:
    def test_farmer_cannot_manage_plans(self, client, farmer):
        _, headers = farmer
        assert client.get('/api/admin/plans', headers=headers).status_code == 403
        response = client.post('/api/admin/plans', headers=headers, json={
            'name': 'Premium', 'price': 499, 'duration_months': 12
        })
        assert response.status_code == 403

    def test_create_edit_and_retire_plan(self, client, admin):
        _, headers = admin
        response = client.post('/api/admin/plans', headers=headers, json={
            'name': 'Premium', 'price': 499, 'duration_months': 12, 'features': ['AI doctor', 'Marketplace']
        })
        assert response.status_code == 201
        plan = response.get_json()

        response = client.put(f"/api/admin/plans/{plan['id']}", headers=headers, json={'is_active': False})
        assert response.status_code == 200
        assert response.get_json()['price'] == 499
        assert response.get_json()['features'] == ['AI doctor', 'Marketplace']
        assert plan['id'] not in [p['id'] for p in client.get('/api/plans').get_json()]
        assert plan['id'] in [p['id'] for p in client.get('/api/admin/plans', headers=headers).get_json()]

        assert client.delete(f"/api/admin/plans/{plan['id']}", headers=headers).status_code == 200
        assert client.put(f"/api/admin/plans/{plan['id']}", headers=headers, json={'price': 1}).status_code == 404

    @pytest.mark.parametrize('payload', [
        {'name': 'Premium', 'price': -1, 'duration_months': 12},
        {'name': 'Premium', 'price': 499, 'duration_months': 0},
        {'name': 'P', 'price': 499, 'duration_months': 12},
    ])
    def test_invalid_plan(self, client, admin, payload):
        _, headers = admin
        assert client.post('/api/admin/plans', headers=headers, json=payload).status_code == 400

    def test_subscribed_plan_cannot_be_deleted(self, client, admin, plan_id):
        _, headers = admin
        response = client.delete(f'/api/admin/plans/{plan_id}', headers=headers)
        assert response.status_code == 400
        assert plan_id in [p['id'] for p in client.get('/api/admin/plans', headers=headers).get_json()]

    def test_subscription_list_and_totals(self, client, admin, farmer):
        _, headers = admin
        client.put('/api/profile', headers=headers, json={'full_name': 'Site Admin'})
        body = client.get('/api/admin/subscriptions', headers=headers).get_json()
        assert body['stats']['total_subscriptions'] == 2
        assert body['stats']['active_subscriptions'] == 2
        assert body['stats']['total_revenue'] == 0

        found = client.get('/api/admin/subscriptions?search=site', headers=headers).get_json()['subscriptions']
        assert [s['full_name'] for s in found] == ['Site Admin']
        assert client.get('/api/admin/subscriptions?search=nobody', headers=headers).get_json()['subscriptions'] == []
