import logging
import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone

from inventory.models import MenuItem

logger = logging.getLogger(__name__)


# Documented lifecycle; other moves are applied but logged
ALLOWED_TRANSITIONS = {
    'pending': {'preparing', 'rejected'},
    'accepted': {'preparing', 'rejected'},
    'preparing': {'ready'},
    'ready': {'completed'},
}


class Order(models.Model):
    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("accepted", "Accepted"),
        ("preparing", "Preparing"),
        ("ready", "Ready"),
        ("completed", "Completed"),
        ("rejected", "Rejected"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer_name = models.CharField(max_length=100, null=True, blank=True)
    table_number = models.CharField(max_length=20, null=True, blank=True)
    order_notes = models.TextField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending", db_index=True)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    def calculate_total(self):
        """Sum of frozen line prices times quantities"""
        return sum(
            (item.price_at_order_time * item.quantity for item in self.order_items.all()),
            Decimal('0.00')
        )

    def apply_status(self, status, customer_name=None, table_number=None):
        """
        Move the order to ``status`` and stamp the matching timestamp.

        Accepting hands the order straight to the kitchen, so it is stored as
        ``preparing``. The current status is not checked.
        """
        previous = self.status
        update_fields = ['status']

        if status == 'accepted':
            self.customer_name = customer_name
            self.table_number = table_number
            self.accepted_at = timezone.now()
            update_fields += ['customer_name', 'table_number', 'accepted_at']
            status = 'preparing'
        elif status == 'completed':
            self.completed_at = timezone.now()
            update_fields.append('completed_at')

        if status not in ALLOWED_TRANSITIONS.get(previous, set()):
            logger.warning("Order %s moved outside the usual flow: %s -> %s", self.id, previous, status)

        self.status = status
        self.save(update_fields=update_fields)
        logger.info("Order %s status %s -> %s", self.id, previous, status)
        return self

    def reject(self):
        return self.apply_status('rejected')

    def __str__(self):
        return f"#{self.id} - {self.customer_name or 'Guest'} - {self.status}"

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, related_name='order_items', on_delete=models.CASCADE)
    # Line items outlive the menu entry they were ordered from
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.SET_NULL, null=True, related_name='order_items'
    )
    quantity = models.PositiveIntegerField()
    price_at_order_time = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def line_total(self):
        return self.price_at_order_time * self.quantity

    def __str__(self):
        name = self.menu_item.name if self.menu_item else 'Removed item'
        return f"{self.quantity} x {name}"

    class Meta:
        db_table = 'order_items'
        ordering = ['created_at', 'id']
