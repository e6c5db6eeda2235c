import uuid
from decimal import Decimal

import pytest

from orders.models import Order, OrderItem

pytestmark = pytest.mark.django_db

MISSING_ID = '3f2b8c1e-9a4d-4c2b-8e1f-0a1b2c3d4e5f'


def create_order(client, items, **fields):
    return client.post('/api/orders/', {'items': items, **fields}, format='json')


class TestCreateOrder:
    def test_two_line_order_totals_from_menu_prices(self, client, latte, croissant):
        response = create_order(client, [
            {'menu_item_id': str(latte.id), 'quantity': 2},
            {'menu_item_id': str(croissant.id), 'quantity': 1},
        ], customer_name='Andi', table_number='5')

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        assert body['message'] == 'Order created successfully'
        data = body['data']
        assert Decimal(data['total_price']) == Decimal('55000')
        assert data['status'] == 'pending'
        assert data['customer_name'] == 'Andi'
        assert len(data['order_items']) == 2
        line = next(i for i in data['order_items'] if i['menu_item_id'] == str(latte.id))
        assert Decimal(line['price_at_order_time']) == Decimal('25000')
        assert line['menu_item'] == {
            'id': str(latte.id), 'name': 'Latte', 'description': 'Milk coffee', 'image_url': None,
        }

    def test_client_prices_are_ignored(self, client, latte):
        response = create_order(client, [
            {'menu_item_id': str(latte.id), 'quantity': 1, 'price': 1},
        ])
        assert response.status_code == 201
        assert Decimal(response.json()['data']['total_price']) == Decimal('25000')
        assert OrderItem.objects.get().price_at_order_time == Decimal('25000')

    def test_unavailable_item_is_rejected(self, client, latte, sold_out):
        response = create_order(client, [
            {'menu_item_id': str(latte.id), 'quantity': 1},
            {'menu_item_id': str(sold_out.id), 'quantity': 1},
        ])
        assert response.status_code == 400
        assert response.json() == {'success': False, 'error': 'Matcha Cake is currently unavailable'}
        assert not Order.objects.exists()

    def test_unknown_item_is_not_found(self, client, latte):
        response = create_order(client, [{'menu_item_id': MISSING_ID, 'quantity': 1}])
        assert response.status_code == 404
        assert response.json()['success'] is False
        assert not Order.objects.exists()

    @pytest.mark.parametrize('quantity', [0, 1001, 1.5, 'two', None])
    def test_quantity_bounds(self, client, latte, quantity):
        response = create_order(client, [{'menu_item_id': str(latte.id), 'quantity': quantity}])
        assert response.status_code == 400
        assert 'quantity' in response.json()['error']

    @pytest.mark.parametrize('quantity', [1, 1000])
    def test_quantity_limits_are_inclusive(self, client, latte, quantity):
        response = create_order(client, [{'menu_item_id': str(latte.id), 'quantity': quantity}])
        assert response.status_code == 201

    def test_non_v4_id_is_invalid(self, client, latte):
        response = create_order(client, [{'menu_item_id': str(uuid.uuid1()), 'quantity': 1}])
        assert response.status_code == 400
        assert 'menu_item_id' in response.json()['error']

    @pytest.mark.parametrize('items', [[], 'latte', None])
    def test_items_must_be_a_non_empty_list(self, client, items):
        response = create_order(client, items)
        assert response.status_code == 400
        assert response.json()['success'] is False

    def test_too_many_lines(self, client, latte):
        items = [{'menu_item_id': str(latte.id), 'quantity': 1}] * 51
        assert create_order(client, items).status_code == 400

    def test_bad_table_number(self, client, latte):
        response = create_order(client, [{'menu_item_id': str(latte.id), 'quantity': 1}], table_number='A 1!')
        assert response.status_code == 400

    def test_text_fields_are_sanitized(self, client, latte):
        response = create_order(
            client, [{'menu_item_id': str(latte.id), 'quantity': 1}],
            customer_name='<script>Budi</script>', order_notes='  less sugar  '
        )
        assert response.status_code == 201
        order = Order.objects.get()
        assert order.customer_name == 'scriptBudi/script'
        assert order.order_notes == 'less sugar'


class TestReadOrders:
    def test_list_newest_first(self, client, make_order, latte):
        first = make_order(items=[(latte, 1)])
        second = make_order(items=[(latte, 2)])
        Order.objects.filter(pk=first.pk).update(created_at=second.created_at.replace(year=2020))

        data = client.get('/api/orders/').json()['data']
        assert [o['id'] for o in data] == [str(second.id), str(first.id)]
        assert len(data[0]['order_items']) == 1

    def test_filter_by_status(self, client, make_order):
        make_order(status='pending')
        ready = make_order(status='ready')
        data = client.get('/api/orders/', {'status': 'ready'}).json()['data']
        assert [o['id'] for o in data] == [str(ready.id)]

    def test_invalid_status_filter(self, client):
        response = client.get('/api/orders/', {'status': 'lost'})
        assert response.status_code == 400
        assert response.json()['success'] is False

    def test_detail(self, client, make_order, latte):
        order = make_order(items=[(latte, 3)])
        data = client.get(f'/api/orders/{order.id}/').json()['data']
        assert data['id'] == str(order.id)
        assert data['order_items'][0]['quantity'] == 3

    def test_detail_bad_id_and_missing(self, client):
        assert client.get('/api/orders/not-a-uuid/').status_code == 400
        assert client.get(f'/api/orders/{MISSING_ID}/').status_code == 404


class TestStatusTransitions:
    def test_accept_moves_to_preparing(self, client, make_order):
        order = make_order()
        response = client.patch(f'/api/orders/{order.id}/', {
            'status': 'accepted', 'customer_name': 'Sari', 'table_number': 'B-2',
        }, format='json')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['status'] == 'preparing'
        assert data['accepted_at'] is not None
        order.refresh_from_db()
        assert order.customer_name == 'Sari'
        assert order.table_number == 'B-2'

    def test_accept_falls_back_to_order_details(self, client, make_order):
        order = make_order(customer_name='Sari', table_number='4')
        response = client.patch(f'/api/orders/{order.id}/', {'status': 'accepted'}, format='json')
        assert response.status_code == 200
        assert response.json()['data']['status'] == 'preparing'

    def test_accept_requires_name_and_table(self, client, make_order):
        order = make_order()
        response = client.patch(f'/api/orders/{order.id}/', {'status': 'accepted', 'customer_name': 'Sari'},
                                format='json')
        assert response.status_code == 400
        assert response.json()['error'] == 'Customer name and table number are required to accept an order'
        order.refresh_from_db()
        assert order.status == 'pending'

    def test_ready_then_completed(self, client, make_order):
        order = make_order(status='preparing')
        assert client.patch(f'/api/orders/{order.id}/', {'status': 'ready'}, format='json').status_code == 200
        response = client.patch(f'/api/orders/{order.id}/', {'status': 'completed'}, format='json')
        data = response.json()['data']
        assert data['status'] == 'completed'
        assert data['completed_at'] is not None

    def test_transition_outside_flow_is_applied(self, client, make_order):
        order = make_order(status='completed')
        response = client.patch(f'/api/orders/{order.id}/', {'status': 'pending'}, format='json')
        assert response.status_code == 200
        order.refresh_from_db()
        assert order.status == 'pending'

    def test_invalid_or_missing_status(self, client, make_order):
        order = make_order()
        assert client.patch(f'/api/orders/{order.id}/', {'status': 'lost'}, format='json').status_code == 400
        assert client.patch(f'/api/orders/{order.id}/', {}, format='json').status_code == 400

    def test_unknown_order(self, client):
        response = client.patch(f'/api/orders/{MISSING_ID}/', {'status': 'ready'}, format='json')
        assert response.status_code == 404
        assert response.json() == {'success': False, 'error': 'Order not found'}

    def test_bad_order_id(self, client):
        response = client.patch('/api/orders/123/', {'status': 'ready'}, format='json')
        assert response.status_code == 400

    def test_delete_soft_rejects(self, client, make_order, latte):
        order = make_order(items=[(latte, 1)])
        response = client.delete(f'/api/orders/{order.id}/')
        assert response.status_code == 200
        assert response.json()['data']['status'] == 'rejected'
        order.refresh_from_db()
        assert order.status == 'rejected'
        assert order.order_items.count() == 1

    def test_patch_rejected_keeps_row(self, client, make_order):
        order = make_order()
        client.patch(f'/api/orders/{order.id}/', {'status': 'rejected'}, format='json')
        assert Order.objects.get(pk=order.pk).status == 'rejected'


class TestOrderModel:
    def test_calculate_total(self, make_order, latte, croissant):
        order = make_order(items=[(latte, 2), (croissant, 1)])
        assert order.calculate_total() == Decimal('55000')

    def test_line_items_outlive_menu_item(self, make_order, latte):
        order = make_order(items=[(latte, 1)])
        latte.delete()
        line = order.order_items.get()
        assert line.menu_item is None
        assert line.line_total == Decimal('25000')
