import pytest

from inventory.models import MenuCategory, MenuItem

pytestmark = pytest.mark.django_db


class TestPublicMenu:
    def test_groups_items_by_category(self, client, latte, croissant, coffee_category, food_category):
        body = client.get('/api/menu/').json()
        assert body['success'] is True

        categories = body['data']['categories']
        assert [c['name'] for c in categories] == ['Coffee', 'Food']
        assert [i['name'] for i in categories[0]['items']] == ['Latte']
        assert [i['name'] for i in categories[1]['items']] == ['Croissant']
        assert {i['name'] for i in body['data']['all_items']} == {'Latte', 'Croissant'}

    def test_inactive_categories_are_hidden(self, client, latte, coffee_category):
        coffee_category.is_active = False
        coffee_category.save()
        body = client.get('/api/menu/').json()
        assert body['data']['categories'] == []
        assert len(body['data']['all_items']) == 1

    def test_sold_out_items_are_listed(self, client, coffee_category, sold_out):
        sold_out.replace_categories([str(coffee_category.id)])
        items = client.get('/api/menu/').json()['data']['categories'][0]['items']
        assert items[0]['name'] == 'Matcha Cake'
        assert items[0]['is_available'] is False

    def test_item_in_several_categories(self, client, latte, coffee_category, food_category):
        latte.replace_categories([str(coffee_category.id), str(food_category.id)])
        categories = client.get('/api/menu/').json()['data']['categories']
        assert all('Latte' in [i['name'] for i in c['items']] for c in categories)

    def test_items_carry_category_ids(self, client, latte, coffee_category):
        item = client.get('/api/menu/').json()['data']['all_items'][0]
        assert item['category_ids'] == [str(coffee_category.id)]


class TestMenuModels:
    def test_replace_categories_deduplicates(self, latte, coffee_category):
        latte.replace_categories([str(coffee_category.id), str(coffee_category.id)])
        assert latte.category_ids == [str(coffee_category.id)]

    def test_category_delete_keeps_items(self, latte, coffee_category):
        coffee_category.delete()
        item = MenuItem.objects.get(pk=latte.pk)
        assert item.category_ids == []

    def test_categories_ordered_by_sort_order_then_name(self, db):
        MenuCategory.objects.create(name='B', sort_order=1)
        MenuCategory.objects.create(name='A', sort_order=1)
        MenuCategory.objects.create(name='C', sort_order=0)
        assert [c.name for c in MenuCategory.objects.all()] == ['C', 'A', 'B']
