import logging
from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from authentication.exceptions import NotFound, Unavailable
from cafeorder.fields import OrderStatusField, QuantityField, SanitizedCharField, TableNumberField, UUIDField
from inventory.models import MenuItem
from inventory.serializers import MenuItemSummarySerializer
from .models import Order, OrderItem

logger = logging.getLogger(__name__)

MAX_ORDER_LINES = 50


class OrderItemReadSerializer(serializers.ModelSerializer):
    menu_item = MenuItemSummarySerializer(read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'menu_item_id', 'quantity', 'price_at_order_time', 'menu_item', 'created_at']
        read_only_fields = fields


class OrderReadSerializer(serializers.ModelSerializer):
    order_items = OrderItemReadSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'customer_name', 'table_number', 'order_notes', 'status',
            'total_price', 'created_at', 'accepted_at', 'completed_at', 'order_items'
        ]
        read_only_fields = fields


class OrderLineSerializer(serializers.Serializer):
    """One requested line; any client-side price is ignored."""
    menu_item_id = UUIDField(message='menu_item_id must be a valid id.')
    quantity = QuantityField()


class OrderCreateSerializer(serializers.Serializer):
    customer_name = SanitizedCharField(max_length=100, required=False)
    table_number = TableNumberField(required=False, allow_null=True, allow_blank=True)
    order_notes = SanitizedCharField(max_length=1000, required=False)
    items = OrderLineSerializer(many=True, allow_empty=False, max_length=MAX_ORDER_LINES)

    def validate(self, attrs):
        menu_item_ids = [line['menu_item_id'].lower() for line in attrs['items']]

        # One query for every referenced item
        menu_items = {
            str(item.id): item for item in MenuItem.objects.filter(id__in=set(menu_item_ids))
        }

        for menu_item_id in menu_item_ids:
            if menu_item_id not in menu_items:
                raise NotFound(f"Menu item not found: {menu_item_id}")

        for menu_item_id in menu_item_ids:
            item = menu_items[menu_item_id]
            if not item.is_available:
                raise Unavailable(f"{item.name} is currently unavailable")

        attrs['lines'] = [
            (menu_items[menu_item_id], line['quantity'])
            for menu_item_id, line in zip(menu_item_ids, attrs.pop('items'))
        ]
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        lines = validated_data.pop('lines')

        # Prices always come from the stored menu, never from the request
        total_price = sum(
            (menu_item.price * quantity for menu_item, quantity in lines),
            Decimal('0.00')
        )

        order = Order.objects.create(
            customer_name=validated_data.get('customer_name'),
            table_number=validated_data.get('table_number'),
            order_notes=validated_data.get('order_notes'),
            status='pending',
            total_price=total_price,
        )

        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                menu_item=menu_item,
                quantity=quantity,
                price_at_order_time=menu_item.price,
            )
            for menu_item, quantity in lines
        ])

        logger.info("Order created: %s with %d line(s), total %s", order.id, len(lines), total_price)
        return order


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = OrderStatusField()
    customer_name = SanitizedCharField(max_length=100, required=False)
    table_number = TableNumberField(required=False, allow_null=True, allow_blank=True)

    def validate(self, attrs):
        if attrs['status'] == 'accepted':
            customer_name = attrs.get('customer_name') or self.instance.customer_name
            table_number = attrs.get('table_number') or self.instance.table_number
            if not customer_name or not table_number:
                raise serializers.ValidationError(
                    "Customer name and table number are required to accept an order"
                )
            attrs['customer_name'] = customer_name
            attrs['table_number'] = table_number
        return attrs

    def update(self, instance, validated_data):
        return instance.apply_status(
            validated_data['status'],
            customer_name=validated_data.get('customer_name'),
            table_number=validated_data.get('table_number'),
        )


class CheckoutSerializer(serializers.Serializer):
    customer_name = SanitizedCharField(max_length=100)
    table_number = TableNumberField(required=False, allow_null=True, allow_blank=True)
    order_notes = SanitizedCharField(max_length=1000, required=False)

    def validate_customer_name(self, value):
        if not value:
            raise serializers.ValidationError("Customer name is required")
        return value
