from django.urls import path
from . import views

urlpatterns = [
    # Orders
    path('orders/', views.OrderListCreateView.as_view(), name='order-list-create'),
    path('orders/<str:pk>/', views.OrderDetailView.as_view(), name='order-detail'),

    # Cart
    path('cart/', views.CartView.as_view(), name='cart'),
    path('cart/items/', views.cart_add_item, name='cart-add-item'),
    path('cart/items/<str:menu_item_id>/', views.CartItemView.as_view(), name='cart-item'),
    path('cart/checkout/', views.cart_checkout, name='cart-checkout'),
]
