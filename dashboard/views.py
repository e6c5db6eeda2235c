import logging

from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework.decorators import api_view
from rest_framework.response import Response

from authentication.exceptions import InvalidInput
from orders.serializers import OrderReadSerializer
from . import boards

logger = logging.getLogger(__name__)


@swagger_auto_schema(method='get', responses={200: OrderReadSerializer(many=True)})
@api_view(['GET'])
def kasir_board(request):
    """Cashier queue: pending orders, oldest first"""
    orders = boards.kasir_orders()
    return Response({'success': True, 'data': OrderReadSerializer(orders, many=True).data})


@swagger_auto_schema(
    method='get',
    manual_parameters=[
        openapi.Parameter('status', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                          enum=list(boards.KITCHEN_FILTERS), default='all'),
        openapi.Parameter('date', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                          format=openapi.FORMAT_DATE, description="Local date, defaults to today"),
    ]
)
@api_view(['GET'])
def kitchen_board(request):
    """Kitchen queue for one day, grouped by date with preparing/ready counts"""
    status_filter = request.query_params.get('status') or 'all'
    if status_filter not in boards.KITCHEN_FILTERS:
        raise InvalidInput("status must be one of: {}".format(', '.join(boards.KITCHEN_FILTERS)))

    raw_date = request.query_params.get('date')
    day = boards.parse_board_date(raw_date)
    if raw_date and day is None:
        raise InvalidInput("date must be in YYYY-MM-DD format")

    board = boards.kitchen_board(day, status_filter)
    for group in board['groups']:
        group['orders'] = OrderReadSerializer(group['orders'], many=True).data

    logger.debug("Kitchen board %s (%s): %d group(s)", board['date'], status_filter, len(board['groups']))
    return Response({'success': True, 'data': board})
