"""
Read models for the staff screens.

The cashier board lists orders waiting for payment confirmation. The kitchen
board lists accepted work for one local day, bucketed by the moment the order
reached the kitchen (``accepted_at``, or ``created_at`` for orders that never
went through the cashier).
"""
import datetime

from django.db.models import F
from django.db.models.functions import Coalesce
from django.utils import timezone

from orders.models import Order

KITCHEN_STATUSES = ('accepted', 'preparing', 'ready')

# Filter name -> statuses shown under it
KITCHEN_FILTERS = {
    'all': KITCHEN_STATUSES,
    'preparing': ('accepted', 'preparing'),
    'ready': ('ready',),
}


def kasir_orders():
    """Pending orders, oldest first"""
    return (
        Order.objects.filter(status='pending')
        .prefetch_related('order_items__menu_item')
        .order_by('created_at')
    )


def kitchen_orders(day=None):
    """Kitchen orders whose board time falls on ``day`` (local date, default today)"""
    day = day or timezone.localdate()
    return (
        Order.objects.filter(status__in=KITCHEN_STATUSES)
        .annotate(board_at=Coalesce('accepted_at', 'created_at'))
        .filter(board_at__date=day)
        .prefetch_related('order_items__menu_item')
        .order_by(F('board_at').desc())
    )


def board_date(order):
    return timezone.localtime(order.accepted_at or order.created_at).date()


def group_by_date(orders):
    """Bucket orders by board date, newest group first"""
    groups = {}
    for order in orders:
        groups.setdefault(board_date(order), []).append(order)
    return [
        {'date': day.isoformat(), 'orders': groups[day]}
        for day in sorted(groups, reverse=True)
    ]


def kitchen_board(day=None, status_filter='all'):
    orders = list(kitchen_orders(day))
    shown = KITCHEN_FILTERS[status_filter]

    return {
        'date': (day or timezone.localdate()).isoformat(),
        'status': status_filter,
        'groups': group_by_date(o for o in orders if o.status in shown),
        # Counts ignore the status filter
        'preparing_count': sum(1 for o in orders if o.status in KITCHEN_FILTERS['preparing']),
        'ready_count': sum(1 for o in orders if o.status == 'ready'),
    }


def parse_board_date(value):
    """``YYYY-MM-DD`` to a date; ``None`` for anything else"""
    if not value:
        return None
    try:
        return datetime.date.fromisoformat(str(value))
    except ValueError:
        return None
