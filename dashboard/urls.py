from django.urls import path
from . import views

urlpatterns = [
    path('kasir/', views.kasir_board, name='kasir-board'),
    path('kitchen/', views.kitchen_board, name='kitchen-board'),
]
