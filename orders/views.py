import logging

import django_filters
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import generics, status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.exceptions import InvalidInput, NotFound, Unavailable
from cafeorder.shortcuts import get_object_by_uuid
from cafeorder.validation import INTEGER_RE, ORDER_STATUSES, validate_quantity, validate_uuid
from inventory.models import MenuItem
from .cart import Cart, SessionCartStorage
from .models import Order
from .serializers import (
    CheckoutSerializer, OrderCreateSerializer, OrderReadSerializer, OrderStatusUpdateSerializer,
)

logger = logging.getLogger(__name__)


def orders_queryset():
    return Order.objects.prefetch_related('order_items__menu_item')


def order_response(order, http_status=status.HTTP_200_OK, message=None):
    order = orders_queryset().get(pk=order.pk)
    body = {'success': True, 'data': OrderReadSerializer(order).data}
    if message:
        body['message'] = message
    return Response(body, status=http_status)


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=[(s, s) for s in ORDER_STATUSES])

    class Meta:
        model = Order
        fields = ['status']


class OrderListCreateView(generics.ListCreateAPIView):
    """
    get: Orders newest first, optionally filtered by ?status=
    post: Place an order; prices are taken from the menu
    """
    serializer_class = OrderReadSerializer
    filterset_class = OrderFilter

    def get_queryset(self):
        return orders_queryset().order_by('-created_at')

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_serializer(queryset, many=True)
        return Response({'success': True, 'data': serializer.data})

    @swagger_auto_schema(
        operation_description="Create an order. Line prices and the total are computed from stored menu prices.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            required=['items'],
            properties={
                'customer_name': openapi.Schema(type=openapi.TYPE_STRING, max_length=100),
                'table_number': openapi.Schema(type=openapi.TYPE_STRING, max_length=20),
                'order_notes': openapi.Schema(type=openapi.TYPE_STRING, max_length=1000),
                'items': openapi.Schema(
                    type=openapi.TYPE_ARRAY,
                    max_items=50,
                    items=openapi.Schema(
                        type=openapi.TYPE_OBJECT,
                        required=['menu_item_id', 'quantity'],
                        properties={
                            'menu_item_id': openapi.Schema(type=openapi.TYPE_STRING, format=openapi.FORMAT_UUID),
                            'quantity': openapi.Schema(type=openapi.TYPE_INTEGER, minimum=1, maximum=1000),
                        }
                    )
                )
            }
        ),
        responses={
            201: OrderReadSerializer,
            400: 'Bad Request',
            404: 'Menu item not found',
        }
    )
    def post(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = serializer.save()
        return order_response(order, status.HTTP_201_CREATED, 'Order created successfully')


class OrderDetailView(APIView):
    """
    get: Order with its line items
    patch: Change the order status (accept, reject, ready, complete)
    delete: Reject the order; the row is kept
    """

    def get(self, request, pk):
        order = get_object_by_uuid(orders_queryset(), pk, 'Order')
        return Response({'success': True, 'data': OrderReadSerializer(order).data})

    @swagger_auto_schema(
        operation_description="Accepting requires customer name and table number and moves the order to preparing",
        request_body=OrderStatusUpdateSerializer,
        responses={200: OrderReadSerializer}
    )
    def patch(self, request, pk):
        order = get_object_by_uuid(Order.objects, pk, 'Order')
        serializer = OrderStatusUpdateSerializer(order, data=request.data)
        serializer.is_valid(raise_exception=True)
        order = serializer.save()
        return order_response(order)

    def delete(self, request, pk):
        order = get_object_by_uuid(Order.objects, pk, 'Order')
        order.reject()
        logger.info("Order %s rejected", order.id)
        return order_response(order)


# =============== CART ===============

def whole_number(value):
    """Integer from a JSON number or digit string; None for fractions and anything else"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and INTEGER_RE.match(value.strip()):
        return int(value.strip())
    return None


def get_cart(request):
    return Cart(SessionCartStorage(request.session))


def cart_response(cart, http_status=status.HTTP_200_OK):
    return Response({
        'success': True,
        'data': {
            'items': cart.lines(),
            'total': str(cart.total()),
            'item_count': cart.item_count(),
        }
    }, status=http_status)


class CartView(APIView):
    """
    get: Cart contents, total and item count
    delete: Empty the cart
    """

    def get(self, request):
        return cart_response(get_cart(request))

    def delete(self, request):
        cart = get_cart(request)
        cart.clear()
        return cart_response(cart)


@swagger_auto_schema(
    method='post',
    request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['menu_item_id'],
        properties={'menu_item_id': openapi.Schema(type=openapi.TYPE_STRING, format=openapi.FORMAT_UUID)}
    )
)
@api_view(['POST'])
def cart_add_item(request):
    """Add one unit of an available menu item"""
    item = get_object_by_uuid(MenuItem.objects, request.data.get('menu_item_id'), 'Menu item')
    if not item.is_available:
        raise Unavailable(f"{item.name} is currently unavailable")

    cart = get_cart(request)
    cart.add_item({
        'menu_item_id': str(item.id),
        'name': item.name,
        'description': item.description,
        'price': item.price,
        'image_url': item.image_url,
    })
    return cart_response(cart)


class CartItemView(APIView):
    """
    patch: Set the quantity of a cart line; zero or less removes it
    delete: Remove a cart line
    """

    def _menu_item_id(self, menu_item_id):
        valid = validate_uuid(menu_item_id)
        if not valid:
            raise InvalidInput("Invalid menu item id")
        return valid.lower()

    @swagger_auto_schema(request_body=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        required=['quantity'],
        properties={'quantity': openapi.Schema(type=openapi.TYPE_INTEGER)}
    ))
    def patch(self, request, menu_item_id):
        menu_item_id = self._menu_item_id(menu_item_id)
        cart = get_cart(request)
        if not cart.item_quantity(menu_item_id):
            raise NotFound("Item is not in the cart")

        raw_quantity = request.data.get('quantity')
        if raw_quantity is None:
            raise InvalidInput("quantity is required")
        quantity = whole_number(raw_quantity)
        if quantity is None:
            raise InvalidInput("quantity must be a whole number")
        if quantity > 0 and validate_quantity(quantity) is None:
            raise InvalidInput("Quantity must be a whole number between 1 and 1000.")

        cart.update_quantity(menu_item_id, quantity)
        return cart_response(cart)

    def delete(self, request, menu_item_id):
        cart = get_cart(request)
        cart.remove_item(self._menu_item_id(menu_item_id))
        return cart_response(cart)


@swagger_auto_schema(
    method='post',
    request_body=CheckoutSerializer,
    responses={201: OrderReadSerializer}
)
@api_view(['POST'])
def cart_checkout(request):
    """Turn the cart into an order and empty the cart"""
    cart = get_cart(request)
    if not len(cart):
        raise InvalidInput("Cart is empty")

    details = CheckoutSerializer(data=request.data)
    details.is_valid(raise_exception=True)

    serializer = OrderCreateSerializer(data={
        **{key: value for key, value in details.validated_data.items() if value is not None},
        'items': cart.as_order_items(),
    })
    serializer.is_valid(raise_exception=True)
    order = serializer.save()

    cart.clear()
    return order_response(order, status.HTTP_201_CREATED, 'Order created successfully')
