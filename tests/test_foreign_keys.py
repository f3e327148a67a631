"""
Deletes against a SQLite file with foreign key enforcement switched on.
"""
from datetime import date

import pytest
from sqlalchemy import event

from livestock import create_app, db
from livestock.config import TestConfig
from livestock.models import FeedingLog, MarketplaceListing


def enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


@pytest.fixture
def app(tmp_path):
    class Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'livestock.db'}"
        UPLOAD_FOLDER = str(tmp_path / 'uploads')

    app = create_app(Config)
    with app.app_context():
        db.engine.dispose()
        event.listen(db.engine, 'connect', enable_foreign_keys)
        assert db.session.execute(db.text('PRAGMA foreign_keys')).scalar() == 1
        db.session.remove()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def animal(client, farmer):
    _, headers = farmer
    response = client.post('/api/animals', headers=headers, json={
        'name': 'Lakshmi', 'species': 'cattle', 'gender': 'female'
    })
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture
def schedule(client, farmer, animal):
    _, headers = farmer
    response = client.post('/api/feeding/schedules', headers=headers, json={
        'animal_id': animal['id'], 'feed_type': 'Green fodder', 'quantity': '20 kg', 'frequency': 'twice daily'
    })
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture
def feeding_log(client, farmer, animal, schedule):
    _, headers = farmer
    response = client.post('/api/feeding/logs', headers=headers, json={
        'animal_id': animal['id'], 'schedule_id': schedule['id'], 'feed_type': 'Green fodder',
        'quantity_fed': '10 kg'
    })
    assert response.status_code == 201
    return response.get_json()


class TestDeletesWithForeignKeys:
    def test_deleting_schedule_keeps_its_logs(self, app, client, farmer, schedule, feeding_log):
        _, headers = farmer
        response = client.delete(f"/api/feeding/schedules/{schedule['id']}", headers=headers)
        assert response.status_code == 200

        logs = client.get('/api/feeding/logs', headers=headers).get_json()
        assert [entry['id'] for entry in logs] == [feeding_log['id']]
        assert logs[0]['schedule_id'] is None
        assert client.get('/api/feeding/schedules', headers=headers).get_json() == []

    def test_deleting_animal_removes_its_records(self, app, client, farmer, animal, feeding_log):
        _, headers = farmer
        response = client.post('/api/health-records', headers=headers, json={
            'animal_id': animal['id'], 'record_date': date.today().isoformat(),
            'symptoms': 'Fever', 'diagnosis': 'Mild infection', 'treatment': 'Antibiotics'
        })
        assert response.status_code == 201

        assert client.delete(f"/api/animals/{animal['id']}", headers=headers).status_code == 200
        assert client.get('/api/health-records', headers=headers).get_json() == []
        with app.app_context():
            assert FeedingLog.query.count() == 0

    def test_deleting_animal_unlinks_its_listing(self, app, client, farmer, animal):
        _, headers = farmer
        response = client.post('/api/marketplace/listings', headers=headers, json={
            'title': 'Gir cow for sale', 'animal_id': animal['id'], 'location': 'Rajkot',
            'contact_number': '9876543210'
        })
        listing_id = response.get_json()['id']

        assert client.delete(f"/api/animals/{animal['id']}", headers=headers).status_code == 200
        with app.app_context():
            assert db.session.get(MarketplaceListing, listing_id).animal_id is None

    def test_deleting_listing_removes_enquiries(self, client, farmer, register, headers_for):
        _, headers = farmer
        listing = client.post('/api/marketplace/listings', headers=headers, json={
            'title': 'Murrah buffalo', 'location': 'Hisar', 'contact_number': '9876543210'
        }).get_json()
        _, token = register(full_name='Buyer')
        response = client.post(f"/api/marketplace/listings/{listing['id']}/enquiries",
                               headers=headers_for(token), json={'message': 'What is her yield?'})
        assert response.status_code == 201

        assert client.delete(f"/api/marketplace/listings/{listing['id']}", headers=headers).status_code == 200
        sent = client.get('/api/marketplace/my-enquiries', headers=headers_for(token)).get_json()['sent']
        assert sent == []
