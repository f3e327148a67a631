from datetime import timedelta

from livestock import db
from livestock.models import HelpdeskSlaConfig, MarketplaceEnquiry, SubscriptionPlan
from livestock.models.base_model import utcnow


def test_seed_reference_is_idempotent(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['seed-reference'])
    assert 'Seeded 4 SLA config(s) and 3 plan(s).' in result.output

    result = runner.invoke(args=['seed-reference'])
    assert 'Seeded 0 SLA config(s) and 0 plan(s).' in result.output
    with app.app_context():
        assert HelpdeskSlaConfig.query.count() == 4
        assert SubscriptionPlan.query.count() == 3


def test_grant_role_command(app, register):
    register(email='vet@example.com')
    result = app.test_cli_runner().invoke(args=['grant-role', 'vet@example.com', 'veterinary_officer'])
    assert 'farmer, veterinary_officer' in result.output


def test_grant_role_unknown_user(app):
    result = app.test_cli_runner().invoke(args=['grant-role', 'ghost@example.com', 'admin'])
    assert result.exit_code != 0


def test_send_enquiry_reminders(app, client, farmer, register, headers_for):
    _, seller_headers = farmer
    listing = client.post('/api/marketplace/listings', headers=seller_headers, json={
        'title': 'Sahiwal heifer', 'location': 'Karnal', 'contact_number': '9876543210'
    }).get_json()
    _, token = register(full_name='Eager Buyer')
    buyer_headers = headers_for(token)
    old = client.post(f"/api/marketplace/listings/{listing['id']}/enquiries", headers=buyer_headers,
                      json={'message': 'Can I visit on Sunday?'}).get_json()
    fresh = client.post(f"/api/marketplace/listings/{listing['id']}/enquiries", headers=buyer_headers,
                        json={'message': 'Is the price negotiable?'}).get_json()
    with app.app_context():
        db.session.get(MarketplaceEnquiry, old['id']).created_at = utcnow() - timedelta(hours=30)
        db.session.commit()

    runner = app.test_cli_runner()
    assert 'Sent 1 enquiry reminder(s).' in runner.invoke(args=['send-enquiry-reminders']).output
    assert 'Sent 0 enquiry reminder(s).' in runner.invoke(args=['send-enquiry-reminders']).output

    with app.app_context():
        assert db.session.get(MarketplaceEnquiry, old['id']).reminder_sent is True
        assert db.session.get(MarketplaceEnquiry, fresh['id']).reminder_sent is False
    reminders = [n for n in client.get('/api/notifications', headers=seller_headers).get_json()
                 if n['title'] == 'Marketplace Enquiry Reminder']
    assert len(reminders) == 1
    assert reminders[0]['related_entity_id'] == old['id']
    assert 'Eager Buyer' in reminders[0]['message']
