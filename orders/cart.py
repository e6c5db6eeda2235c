"""
Cart kept with the customer's browser.

``Cart`` is a plain object over an injected storage, so the same logic works
against a Django session (a signed cookie in this project) or an in-memory
dict in tests and scripts. Prices stored in the cart are for display only;
checkout recomputes every price from the menu.
"""
from decimal import Decimal

from django.conf import settings


def default_cart_key():
    return getattr(settings, 'CART_SESSION_KEY', 'cart-storage')


class MemoryCartStorage:
    def __init__(self, data=None):
        self.data = data if data is not None else {}

    def load(self, key):
        return self.data.get(key)

    def save(self, key, value):
        self.data[key] = value


class SessionCartStorage:
    def __init__(self, session):
        self.session = session

    def load(self, key):
        return self.session.get(key)

    def save(self, key, value):
        self.session[key] = value
        self.session.modified = True


class Cart:
    def __init__(self, storage, key=None):
        self.storage = storage
        self.key = key or default_cart_key()
        stored = storage.load(self.key) or {}
        self.items = [dict(line) for line in stored.get('items', [])]

    def _persist(self):
        self.storage.save(self.key, {'items': self.items})

    def _find(self, menu_item_id):
        for line in self.items:
            if line['menu_item_id'] == menu_item_id:
                return line
        return None

    def add_item(self, item):
        """Add one unit of ``item`` (a dict with at least menu_item_id, name and price)."""
        line = self._find(item['menu_item_id'])
        if line:
            line['quantity'] += 1
        else:
            self.items.append({
                'menu_item_id': item['menu_item_id'],
                'name': item['name'],
                'description': item.get('description'),
                'price': str(item['price']),
                'image_url': item.get('image_url'),
                'quantity': 1,
            })
        self._persist()

    def remove_item(self, menu_item_id):
        self.items = [line for line in self.items if line['menu_item_id'] != menu_item_id]
        self._persist()

    def update_quantity(self, menu_item_id, quantity):
        if quantity <= 0:
            self.remove_item(menu_item_id)
            return
        line = self._find(menu_item_id)
        if line:
            line['quantity'] = quantity
            self._persist()

    def clear(self):
        self.items = []
        self._persist()

    def total(self):
        return sum((Decimal(line['price']) * line['quantity'] for line in self.items), Decimal('0'))

    def item_count(self):
        return sum(line['quantity'] for line in self.items)

    def item_quantity(self, menu_item_id):
        line = self._find(menu_item_id)
        return line['quantity'] if line else 0

    def lines(self):
        return [dict(line) for line in self.items]

    def as_order_items(self):
        return [
            {'menu_item_id': line['menu_item_id'], 'quantity': line['quantity']}
            for line in self.items
        ]

    def __len__(self):
        return len(self.items)
