import uuid

from django.db import models


class MenuCategory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'menu_categories'
        ordering = ['sort_order', 'name']
        verbose_name_plural = "Menu Categories"


class MenuItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Single-category column kept from the first schema; associations live in the junction
    category = models.ForeignKey(
        MenuCategory, on_delete=models.SET_NULL, null=True, blank=True, related_name='legacy_items'
    )
    name = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    image_url = models.URLField(max_length=500, null=True, blank=True)
    is_available = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    categories = models.ManyToManyField(
        MenuCategory, through='MenuItemCategory', related_name='items', blank=True
    )

    @property
    def category_ids(self):
        """Ids of every associated category, as strings."""
        return [str(link.category_id) for link in self.category_links.all()]

    def replace_categories(self, category_ids):
        """Drop every association and recreate it from ``category_ids``."""
        self.category_links.all().delete()
        MenuItemCategory.objects.bulk_create(
            [MenuItemCategory(menu_item=self, category_id=category_id) for category_id in dict.fromkeys(category_ids)]
        )

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'menu_items'
        ordering = ['sort_order', 'name']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0) & models.Q(price__lte=10000000),
                name='menu_item_price_range',
            ),
        ]


class MenuItemCategory(models.Model):
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name='category_links')
    category = models.ForeignKey(MenuCategory, on_delete=models.CASCADE, related_name='item_links')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.menu_item_id} -> {self.category_id}"

    class Meta:
        db_table = 'menu_item_categories'
        unique_together = ['menu_item', 'category']
        ordering = ['created_at', 'id']
