from django.urls import path
from . import views


urlpatterns = [
    # Public menu
    path('menu/', views.menu, name='menu'),

    # Admin category URLs
    path('admin/categories/', views.AdminCategoryListCreateView.as_view(), name='admin-category-list-create'),
    path('admin/categories/<str:pk>/', views.AdminCategoryDetailView.as_view(), name='admin-category-detail'),

    # Admin menu item URLs
    path('admin/menu-items/', views.AdminMenuItemListCreateView.as_view(), name='admin-menu-item-list-create'),
    path('admin/menu-items/<str:pk>/', views.AdminMenuItemDetailView.as_view(), name='admin-menu-item-detail'),
    path('admin/menu-items/<str:pk>/categories/', views.MenuItemCategoriesView.as_view(), name='admin-menu-item-categories'),
]
