"""
Feed inventory classification and the marketplace.
"""
from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from livestock.services.feeding_service import (
    expiry_status, stock_status, summarize_inventory, EXPIRED, EXPIRING_SOON, LOW_STOCK
)

TODAY = date(2024, 6, 1)


def item(quantity=50, expiry_date=None, cost_per_unit=None):
    return SimpleNamespace(quantity=quantity, expiry_date=expiry_date, cost_per_unit=cost_per_unit)


class TestInventoryRules:
    def test_stock_below_threshold_is_low(self):
        assert stock_status(item(quantity=9), 10) == LOW_STOCK
        assert stock_status(item(quantity=10), 10) == 'In Stock'

    @pytest.mark.parametrize('days_left, expected', [
        (-1, EXPIRED),
        (0, EXPIRING_SOON),
        (30, EXPIRING_SOON),
        (31, None),
    ])
    def test_expiry_classification(self, days_left, expected):
        stock = item(expiry_date=TODAY + timedelta(days=days_left))
        assert expiry_status(stock, 30, TODAY) == expected

    def test_no_expiry_date(self):
        assert expiry_status(item(), 30, TODAY) is None

    def test_summary_counts(self):
        items = [
            item(quantity=5, cost_per_unit=20),
            item(quantity=100, expiry_date=TODAY + timedelta(days=3), cost_per_unit=1.5),
            item(quantity=40, expiry_date=TODAY - timedelta(days=2)),
        ]
        assert summarize_inventory(items, 10, 30, TODAY) == {
            'total_items': 3,
            'low_stock': 1,
            'expiring_soon': 1,
            'expired': 1,
            'total_value': 250.0
        }


class TestInventoryApi:
    def test_feed_name_required(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/feeding/inventory', headers=headers, json={
            'feed_type': 'concentrate', 'quantity': 10, 'unit': 'kg'
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Feed name is required'

    def test_negative_quantity(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/feeding/inventory', headers=headers, json={
            'feed_name': 'Maize bran', 'feed_type': 'concentrate', 'quantity': -1, 'unit': 'kg'
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Quantity must be positive'

    def test_nan_quantity_is_rejected(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/feeding/inventory', headers=headers, content_type='application/json',
                               data='{"feed_name": "Hay", "feed_type": "roughage", "quantity": NaN, "unit": "kg"}')
        assert response.status_code == 400
        assert client.get('/api/feeding/inventory', headers=headers).get_json()['items'] == []

    def test_restock_sends_only_quantity(self, client, farmer):
        _, headers = farmer
        created = client.post('/api/feeding/inventory', headers=headers, json={
            'feed_name': 'Hay', 'feed_type': 'roughage', 'quantity': 5, 'unit': 'kg', 'cost_per_unit': 4
        }).get_json()
        response = client.put(f"/api/feeding/inventory/{created['id']}", headers=headers, json={'quantity': 80})
        assert response.status_code == 200
        body = response.get_json()
        assert body['quantity'] == 80
        assert body['feed_name'] == 'Hay'
        assert body['cost_per_unit'] == 4
        response = client.put(f"/api/feeding/inventory/{created['id']}", headers=headers, json={'quantity': -3})
        assert response.status_code == 400

    def test_listing_carries_status_and_summary(self, client, farmer):
        _, headers = farmer
        expiring = (date.today() + timedelta(days=5)).isoformat()
        client.post('/api/feeding/inventory', headers=headers, json={
            'feed_name': 'Maize bran', 'feed_type': 'concentrate', 'quantity': 3, 'unit': 'kg',
            'cost_per_unit': 10, 'expiry_date': expiring
        })
        body = client.get('/api/feeding/inventory', headers=headers).get_json()
        assert body['items'][0]['stock_status'] == LOW_STOCK
        assert body['items'][0]['expiry_status'] == EXPIRING_SOON
        assert body['summary']['low_stock'] == 1
        assert body['summary']['total_value'] == 30.0

    def test_deleted_item_is_gone(self, client, farmer):
        _, headers = farmer
        created = client.post('/api/feeding/inventory', headers=headers, json={
            'feed_name': 'Hay', 'feed_type': 'roughage', 'quantity': 100, 'unit': 'kg'
        }).get_json()
        assert client.delete(f"/api/feeding/inventory/{created['id']}", headers=headers).status_code == 200
        assert client.get('/api/feeding/inventory', headers=headers).get_json()['items'] == []

    def test_other_users_item_is_404(self, client, farmer, register, headers_for):
        _, headers = farmer
        created = client.post('/api/feeding/inventory', headers=headers, json={
            'feed_name': 'Hay', 'feed_type': 'roughage', 'quantity': 100, 'unit': 'kg'
        }).get_json()
        _, token = register()
        response = client.delete(f"/api/feeding/inventory/{created['id']}", headers=headers_for(token))
        assert response.status_code == 404


@pytest.fixture
def listing(client, farmer):
    _, headers = farmer
    response = client.post('/api/marketplace/listings', headers=headers, json={
        'title': 'Gir cow for sale', 'price': 45000, 'location': 'Rajkot', 'contact_number': '9876543210'
    })
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture
def buyer(register, headers_for):
    user_id, token = register(full_name='Buyer')
    return user_id, headers_for(token)


class TestMarketplace:
    def test_nine_digit_contact_number_fails(self, client, farmer):
        _, headers = farmer
        response = client.post('/api/marketplace/listings', headers=headers, json={
            'title': 'Gir cow for sale', 'location': 'Rajkot', 'contact_number': '987654321'
        })
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Contact number must be exactly 10 digits'
        assert client.get('/api/marketplace/my-listings', headers=headers).get_json() == []

    def test_detail_counts_views(self, client, listing, buyer):
        _, headers = buyer
        client.get(f"/api/marketplace/listings/{listing['id']}", headers=headers)
        body = client.get(f"/api/marketplace/listings/{listing['id']}", headers=headers).get_json()
        assert body['views_count'] == 2
        assert body['reviews'] == []

    def test_only_seller_may_edit(self, client, listing, buyer):
        _, headers = buyer
        response = client.put(f"/api/marketplace/listings/{listing['id']}", headers=headers, json={
            'title': 'Mine now', 'location': 'Rajkot', 'contact_number': '9876543210'
        })
        assert response.status_code == 403

    def test_sold_listing_leaves_search(self, client, farmer, listing, buyer):
        _, headers = farmer
        response = client.put(f"/api/marketplace/listings/{listing['id']}", headers=headers, json={
            'title': 'Gir cow for sale', 'location': 'Rajkot', 'contact_number': '9876543210', 'status': 'sold'
        })
        assert response.get_json()['status'] == 'sold'
        _, buyer_headers = buyer
        assert client.get('/api/marketplace/listings', headers=buyer_headers).get_json() == []

    def test_enquiry_flow(self, client, farmer, listing, buyer):
        _, seller_headers = farmer
        _, buyer_headers = buyer
        response = client.post(f"/api/marketplace/listings/{listing['id']}/enquiries", headers=buyer_headers,
                               json={'message': 'Is she still milking?'})
        assert response.status_code == 201
        enquiry_id = response.get_json()['id']

        received = client.get('/api/marketplace/my-enquiries', headers=seller_headers).get_json()['received']
        assert [e['id'] for e in received] == [enquiry_id]

        response = client.put(f'/api/marketplace/enquiries/{enquiry_id}', headers=seller_headers,
                              json={'status': 'responded'})
        assert response.status_code == 200
        assert response.get_json()['status'] == 'responded'

    def test_seller_cannot_enquire_on_own_listing(self, client, farmer, listing):
        _, headers = farmer
        response = client.post(f"/api/marketplace/listings/{listing['id']}/enquiries", headers=headers,
                               json={'message': 'Hello'})
        assert response.status_code == 400

    def test_reviews_update_average(self, client, listing, buyer, register, headers_for):
        _, first = buyer
        _, token = register(full_name='Second Buyer')
        client.post(f"/api/marketplace/listings/{listing['id']}/reviews", headers=first, json={'rating': 5})
        client.post(f"/api/marketplace/listings/{listing['id']}/reviews", headers=headers_for(token),
                    json={'rating': 4})
        body = client.get(f"/api/marketplace/listings/{listing['id']}", headers=first).get_json()
        assert body['review_count'] == 2
        assert body['average_rating'] == 4.5

    def test_rating_out_of_range(self, client, listing, buyer):
        _, headers = buyer
        response = client.post(f"/api/marketplace/listings/{listing['id']}/reviews", headers=headers,
                               json={'rating': 6})
        assert response.status_code == 400
