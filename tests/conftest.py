from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from inventory.models import MenuCategory, MenuItem
from orders.models import Order, OrderItem

ADMIN_PASSWORD = 'test-admin-secret'


@pytest.fixture(autouse=True)
def admin_password(settings):
    settings.ADMIN_PASSWORD = ADMIN_PASSWORD
    settings.DEBUG = False
    return ADMIN_PASSWORD


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def admin_client():
    api_client = APIClient()
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {ADMIN_PASSWORD}')
    return api_client


@pytest.fixture
def coffee_category(db):
    return MenuCategory.objects.create(name='Coffee', sort_order=1)


@pytest.fixture
def food_category(db):
    return MenuCategory.objects.create(name='Food', sort_order=2)


@pytest.fixture
def latte(coffee_category):
    item = MenuItem.objects.create(name='Latte', description='Milk coffee', price=Decimal('25000'))
    item.replace_categories([str(coffee_category.id)])
    return item


@pytest.fixture
def croissant(food_category):
    item = MenuItem.objects.create(name='Croissant', price=Decimal('5000'))
    item.replace_categories([str(food_category.id)])
    return item


@pytest.fixture
def sold_out(db):
    return MenuItem.objects.create(name='Matcha Cake', price=Decimal('30000'), is_available=False)


@pytest.fixture
def make_order(db):
    def _make_order(status='pending', items=(), **fields):
        total = sum((item.price * quantity for item, quantity in items), Decimal('0.00'))
        order = Order.objects.create(status=status, total_price=total, **fields)
        for item, quantity in items:
            OrderItem.objects.create(
                order=order, menu_item=item, quantity=quantity, price_at_order_time=item.price
            )
        return order
    return _make_order
