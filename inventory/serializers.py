from django.db import transaction
from rest_framework import serializers

from authentication.exceptions import NotFound
from cafeorder.fields import (
    ImageUrlField, NameField, PriceField, SanitizedCharField, SortOrderField, UUIDField, UUIDListField,
)
from .models import MenuCategory, MenuItem, MenuItemCategory


def ensure_categories_exist(category_ids):
    """Raise NotFound naming the first id with no matching category."""
    if not category_ids:
        return
    found = {
        str(pk) for pk in MenuCategory.objects.filter(id__in=category_ids).values_list('id', flat=True)
    }
    for category_id in category_ids:
        if category_id.lower() not in found:
            raise NotFound(f"Category not found: {category_id}")


class MenuCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuCategory
        fields = ['id', 'name', 'description', 'is_active', 'sort_order', 'created_at', 'updated_at']
        read_only_fields = fields


class MenuItemSerializer(serializers.ModelSerializer):
    category_ids = serializers.SerializerMethodField()

    class Meta:
        model = MenuItem
        fields = [
            'id', 'name', 'description', 'price', 'image_url', 'is_available',
            'sort_order', 'category_id', 'category_ids', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_category_ids(self, obj):
        return obj.category_ids


class MenuItemSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuItem
        fields = ['id', 'name', 'description', 'image_url']
        read_only_fields = fields


class MenuCategoryWriteSerializer(serializers.Serializer):
    """
    Create or partially update a category; only supplied fields are validated.
    """
    name = NameField()
    description = SanitizedCharField(max_length=1000, required=False)
    is_active = serializers.BooleanField(required=False)
    sort_order = SortOrderField(required=False)

    def create(self, validated_data):
        return MenuCategory.objects.create(**validated_data)

    def update(self, instance, validated_data):
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        return instance


class MenuItemWriteSerializer(serializers.Serializer):
    name = NameField()
    description = SanitizedCharField(max_length=1000, required=False)
    price = PriceField()
    image_url = ImageUrlField(required=False, allow_null=True, allow_blank=True)
    is_available = serializers.BooleanField(required=False)
    sort_order = SortOrderField(required=False)
    category_ids = UUIDListField(required=False)

    def validate_category_ids(self, value):
        value = [category_id.lower() for category_id in value]
        # Checked before anything is written
        ensure_categories_exist(value)
        return value

    @transaction.atomic
    def create(self, validated_data):
        category_ids = validated_data.pop('category_ids', [])
        item = MenuItem.objects.create(**validated_data)
        item.replace_categories(category_ids)
        return item

    @transaction.atomic
    def update(self, instance, validated_data):
        category_ids = validated_data.pop('category_ids', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()

        if category_ids is not None:
            instance.replace_categories(category_ids)

        return instance


class CategoryLinkSerializer(serializers.Serializer):
    category_id = UUIDField(message='category_id must be a valid id.')

    def validate_category_id(self, value):
        value = value.lower()
        ensure_categories_exist([value])
        return value

    def save(self, menu_item):
        link, created = MenuItemCategory.objects.get_or_create(
            menu_item=menu_item,
            category_id=self.validated_data['category_id'],
        )
        return link, created
