from django.contrib import admin
from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    readonly_fields = ['product', 'product_name', 'quantity', 'unit_price', 'line_total']


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['sale_number', 'customer_name', 'payment_method', 'subtotal', 'tax_amount', 'discount_amount', 'total', 'created_at']
    list_filter = ['payment_method', 'created_at']
    search_fields = ['sale_number', 'customer_name', 'customer_phone']
    inlines = [SaleItemInline]
