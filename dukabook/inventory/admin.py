from django.contrib import admin
from .models import InventoryTransaction


@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(admin.ModelAdmin):
    list_display = ['product', 'transaction_type', 'quantity', 'reference_id', 'notes', 'created_at']
    list_filter = ['transaction_type', 'created_at']
    search_fields = ['product__name', 'reference_id', 'notes']
    list_select_related = ['product']
