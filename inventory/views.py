import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import filters, generics, status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.exceptions import InvalidInput
from authentication.permissions import AdminWritePermissionMixin
from cafeorder.shortcuts import get_object_by_uuid
from cafeorder.validation import validate_uuid
from .models import MenuCategory, MenuItem, MenuItemCategory
from .serializers import (
    CategoryLinkSerializer, MenuCategorySerializer, MenuCategoryWriteSerializer,
    MenuItemSerializer, MenuItemWriteSerializer,
)

logger = logging.getLogger(__name__)


def menu_items_queryset():
    return MenuItem.objects.prefetch_related('category_links')


@swagger_auto_schema(
    method='get',
    operation_description="Active categories with their items (available and sold out), plus every item",
)
@api_view(['GET'])
def menu(request):
    """Public menu grouped through the item/category junction"""
    categories = MenuCategory.objects.filter(is_active=True).order_by('sort_order', 'name')
    items = MenuItemSerializer(menu_items_queryset().order_by('sort_order', 'name'), many=True).data

    items_by_category = {}
    for item in items:
        for category_id in item['category_ids']:
            items_by_category.setdefault(category_id, []).append(item)

    grouped = []
    for category in categories:
        data = MenuCategorySerializer(category).data
        data['items'] = items_by_category.get(str(category.id), [])
        grouped.append(data)

    return Response({
        'success': True,
        'data': {
            'categories': grouped,
            'all_items': items,
        }
    })


# Category Views
class AdminCategoryListCreateView(AdminWritePermissionMixin, generics.ListCreateAPIView):
    """
    get: List all categories, inactive ones included
    post: Create a category (admin token required)
    """
    queryset = MenuCategory.objects.all()
    serializer_class = MenuCategorySerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active']
    search_fields = ['name']
    ordering_fields = ['name', 'sort_order', 'created_at']
    ordering = ['sort_order', 'name']

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_serializer(queryset, many=True)
        return Response({'success': True, 'data': serializer.data})

    @swagger_auto_schema(request_body=MenuCategoryWriteSerializer, responses={201: MenuCategorySerializer})
    def post(self, request, *args, **kwargs):
        serializer = MenuCategoryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        logger.info("Category created: %s (%s)", category.name, category.id)
        return Response(
            {'success': True, 'data': MenuCategorySerializer(category).data},
            status=status.HTTP_201_CREATED
        )


class AdminCategoryDetailView(AdminWritePermissionMixin, APIView):
    """
    get: Category details
    patch: Update the supplied fields (admin token required)
    delete: Delete the category and its item links (admin token required)
    """

    def get(self, request, pk):
        category = get_object_by_uuid(MenuCategory.objects, pk, 'Category')
        return Response({'success': True, 'data': MenuCategorySerializer(category).data})

    @swagger_auto_schema(request_body=MenuCategoryWriteSerializer, responses={200: MenuCategorySerializer})
    def patch(self, request, pk):
        category = get_object_by_uuid(MenuCategory.objects, pk, 'Category')
        serializer = MenuCategoryWriteSerializer(category, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        category = serializer.save()
        logger.info("Category updated: %s (%s)", category.name, category.id)
        return Response({'success': True, 'data': MenuCategorySerializer(category).data})

    def delete(self, request, pk):
        category = get_object_by_uuid(MenuCategory.objects, pk, 'Category')
        category.delete()
        logger.info("Category deleted: %s", pk)
        return Response({'success': True, 'message': 'Category deleted successfully'})


# Menu Item Views
class AdminMenuItemListCreateView(AdminWritePermissionMixin, generics.ListCreateAPIView):
    """
    get: List all menu items, unavailable ones included, with their category ids
    post: Create a menu item with optional category links (admin token required)
    """
    serializer_class = MenuItemSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_available']
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'sort_order', 'created_at']
    ordering = ['sort_order', 'name']

    def get_queryset(self):
        return menu_items_queryset()

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_serializer(queryset, many=True)
        return Response({'success': True, 'data': serializer.data})

    @swagger_auto_schema(request_body=MenuItemWriteSerializer, responses={201: MenuItemSerializer})
    def post(self, request, *args, **kwargs):
        serializer = MenuItemWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = serializer.save()
        logger.info("Menu item created: %s (%s) at %s", item.name, item.id, item.price)
        item = menu_items_queryset().get(pk=item.pk)
        return Response(
            {'success': True, 'data': MenuItemSerializer(item).data},
            status=status.HTTP_201_CREATED
        )


class AdminMenuItemDetailView(AdminWritePermissionMixin, APIView):
    """
    get: Menu item details
    patch: Update the supplied fields; category_ids replaces every link (admin token required)
    delete: Delete the menu item (admin token required)
    """

    def get(self, request, pk):
        item = get_object_by_uuid(menu_items_queryset(), pk, 'Menu item')
        return Response({'success': True, 'data': MenuItemSerializer(item).data})

    @swagger_auto_schema(request_body=MenuItemWriteSerializer, responses={200: MenuItemSerializer})
    def patch(self, request, pk):
        item = get_object_by_uuid(MenuItem.objects, pk, 'Menu item')
        serializer = MenuItemWriteSerializer(item, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Menu item updated: %s (%s)", item.name, item.id)
        item = menu_items_queryset().get(pk=item.pk)
        return Response({'success': True, 'data': MenuItemSerializer(item).data})

    def delete(self, request, pk):
        item = get_object_by_uuid(MenuItem.objects, pk, 'Menu item')
        item.delete()
        logger.info("Menu item deleted: %s", pk)
        return Response({'success': True, 'message': 'Menu item deleted successfully'})


class MenuItemCategoriesView(AdminWritePermissionMixin, APIView):
    """
    get: Category ids linked to a menu item
    post: Link a category to the item; linking twice is a no-op (admin token required)
    delete: Unlink the category given by ?category_id= (admin token required)
    """

    def get(self, request, pk):
        item = get_object_by_uuid(menu_items_queryset(), pk, 'Menu item')
        return Response({'success': True, 'data': item.category_ids})

    @swagger_auto_schema(request_body=CategoryLinkSerializer)
    def post(self, request, pk):
        item = get_object_by_uuid(MenuItem.objects, pk, 'Menu item')
        serializer = CategoryLinkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        link, created = serializer.save(menu_item=item)
        if created:
            logger.info("Linked menu item %s to category %s", item.id, link.category_id)
        return Response({
            'success': True,
            'data': {'menu_item_id': str(item.id), 'category_id': str(link.category_id)}
        })

    @swagger_auto_schema(manual_parameters=[
        openapi.Parameter('category_id', openapi.IN_QUERY, description="Category to unlink", type=openapi.TYPE_STRING),
    ])
    def delete(self, request, pk):
        item = get_object_by_uuid(MenuItem.objects, pk, 'Menu item')
        raw_category_id = request.query_params.get('category_id')
        if not raw_category_id:
            raise InvalidInput('category_id query parameter is required')
        category_id = validate_uuid(raw_category_id)
        if not category_id:
            raise InvalidInput('category_id must be a valid id')

        MenuItemCategory.objects.filter(menu_item=item, category_id=category_id).delete()
        logger.info("Unlinked menu item %s from category %s", item.id, category_id)
        return Response({'success': True, 'message': 'Category removed from item'})
