"""
Schemes, content library, notifications, direct messages and the AI assistant.
"""
from datetime import timedelta

from livestock import db
from livestock.models import AiChatMessage
from livestock.models.base_model import utcnow
from livestock.services.ai_chat_service import STUB_REPLY


class TestSchemes:
    def test_state_filter_keeps_nationwide_schemes(self, client, admin, farmer):
        _, admin_headers = admin
        _, headers = farmer
        for name, state in (('National Livestock Mission', None), ('Punjab Dairy Scheme', 'Punjab'),
                            ('Kerala Goat Scheme', 'Kerala')):
            payload = {'scheme_name': name}
            if state:
                payload['state'] = state
            assert client.post('/api/admin/schemes', headers=admin_headers, json=payload).status_code == 201

        schemes = client.get('/api/schemes?state=Punjab', headers=headers).get_json()
        assert sorted(s['scheme_name'] for s in schemes) == ['National Livestock Mission', 'Punjab Dairy Scheme']

    def test_inactive_scheme_is_hidden(self, client, admin, farmer):
        _, admin_headers = admin
        _, headers = farmer
        scheme = client.post('/api/admin/schemes', headers=admin_headers,
                             json={'scheme_name': 'Old Scheme', 'is_active': False}).get_json()
        assert client.get('/api/schemes', headers=headers).get_json() == []
        assert client.get(f"/api/schemes/{scheme['id']}", headers=headers).status_code == 404

    def test_farmer_cannot_manage_schemes(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/admin/schemes', headers=headers, json={'scheme_name': 'Sneaky'})
        assert response.status_code == 403
        assert response.get_json() == {'message': 'Access denied'}


class TestContent:
    def test_view_count_and_featured_first(self, client, admin, farmer):
        _, admin_headers = admin
        _, headers = farmer
        client.post('/api/admin/content', headers=admin_headers, json={
            'title': 'Clean water', 'category': 'best_practices', 'content_type': 'article'
        })
        featured = client.post('/api/admin/content', headers=admin_headers, json={
            'title': 'FMD alert', 'category': 'emergency_alerts', 'content_type': 'article', 'is_featured': True
        }).get_json()

        items = client.get('/api/content', headers=headers).get_json()
        assert items[0]['id'] == featured['id']

        client.get(f"/api/content/{featured['id']}", headers=headers)
        assert client.get(f"/api/content/{featured['id']}", headers=headers).get_json()['view_count'] == 2

    def test_unknown_category(self, client, admin):
        _, headers = admin
        response = client.post('/api/admin/content', headers=headers, json={
            'title': 'Something', 'category': 'gossip', 'content_type': 'article'
        })
        assert response.status_code == 400


class TestNotifications:
    def test_own_and_broadcast(self, client, admin, farmer, register):
        _, admin_headers = admin
        farmer_id, headers = farmer
        other_id, _ = register()
        client.post('/api/admin/notifications', headers=admin_headers,
                    json={'title': 'Vaccination drive', 'message': 'Camp on Sunday'})
        client.post('/api/admin/notifications', headers=admin_headers,
                    json={'user_id': farmer_id, 'title': 'Your ticket', 'message': 'Resolved'})
        client.post('/api/admin/notifications', headers=admin_headers,
                    json={'user_id': other_id, 'title': 'Not yours', 'message': 'Hidden'})

        titles = sorted(n['title'] for n in client.get('/api/notifications', headers=headers).get_json())
        assert titles == ['Vaccination drive', 'Your ticket']

    def test_mark_all_read(self, client, admin, farmer):
        _, admin_headers = admin
        farmer_id, headers = farmer
        client.post('/api/admin/notifications', headers=admin_headers,
                    json={'user_id': farmer_id, 'title': 'Reminder', 'message': 'Deworming due'})
        assert client.post('/api/notifications/read-all', headers=headers).get_json()['updated'] == 1
        assert client.get('/api/notifications?unread=true', headers=headers).get_json() == []


class TestMessages:
    def test_conversation_is_reused(self, client, farmer, register, headers_for):
        _, headers = farmer
        other_id, other_token = register(full_name='Neighbour')

        first = client.post('/api/messages/conversations', headers=headers,
                            json={'recipient_id': other_id, 'message_text': 'Do you sell fodder?'})
        assert first.status_code == 201
        again = client.post('/api/messages/conversations', headers=headers, json={'recipient_id': other_id})
        assert again.status_code == 200
        assert again.get_json()['id'] == first.get_json()['id']

        inbox = client.get('/api/messages/conversations', headers=headers_for(other_token)).get_json()
        assert inbox[0]['unread_count'] == 1
        assert inbox[0]['participants'][0]['name'] == 'Test Farmer'

    def test_reading_marks_messages_read(self, client, farmer, register, headers_for):
        _, headers = farmer
        other_id, other_token = register()
        conversation = client.post('/api/messages/conversations', headers=headers,
                                   json={'recipient_id': other_id, 'message_text': 'Hello'}).get_json()
        messages = client.get(f"/api/messages/conversations/{conversation['id']}",
                              headers=headers_for(other_token)).get_json()
        assert [m['is_read'] for m in messages] == [True]

    def test_outsider_cannot_read(self, client, farmer, register, headers_for):
        _, headers = farmer
        other_id, _ = register()
        _, outsider_token = register()
        conversation = client.post('/api/messages/conversations', headers=headers,
                                   json={'recipient_id': other_id}).get_json()
        response = client.get(f"/api/messages/conversations/{conversation['id']}",
                              headers=headers_for(outsider_token))
        assert response.status_code in (403, 404)

    def test_cannot_message_yourself(self, client, farmer):
        user_id, headers = farmer
        response = client.post('/api/messages/conversations', headers=headers, json={'recipient_id': user_id})
        assert response.status_code == 400


class TestAiChat:
    def test_reply_without_api_key_uses_fixed_answer(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/ai-chat', headers=headers,
                               json={'message': 'My cow is not eating', 'symptoms': 'loss of appetite'})
        assert response.status_code == 201
        assert response.get_json()['response'] == STUB_REPLY

        history = client.get('/api/ai-chat/history', headers=headers).get_json()
        assert [h['message'] for h in history] == ['My cow is not eating']

    def test_foreign_animal_is_404(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/ai-chat', headers=headers, json={'message': 'Help', 'animal_id': 'nope'})
        assert response.status_code == 404

    def test_history_keeps_latest_fifty(self, app, client, farmer):
        user_id, headers = farmer
        start = utcnow() - timedelta(hours=2)
        with app.app_context():
            for n in range(51):
                db.session.add(AiChatMessage(user_id=user_id, message=f'question {n}', response=STUB_REPLY,
                                             created_at=start + timedelta(minutes=n)))
            db.session.commit()

        history = client.get('/api/ai-chat/history', headers=headers).get_json()
        assert len(history) == 50
        assert history[0]['message'] == 'question 1'
        assert history[-1]['message'] == 'question 50'
