from django.urls import path
from .views import (
    inventory_overview, stock_levels, transaction_list,
    inventory_initialize, stock_adjustment_create,
)

urlpatterns = [
    path('inventory/overview/', inventory_overview, name='inventory-overview'),
    path('inventory/stock-levels/', stock_levels, name='inventory-stock-levels'),
    path('inventory/transactions/', transaction_list, name='inventory-transaction-list'),
    path('inventory/initialize/', inventory_initialize, name='inventory-initialize'),
    path('inventory/adjustments/', stock_adjustment_create, name='inventory-adjustment-create'),
]
