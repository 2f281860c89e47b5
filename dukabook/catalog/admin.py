from django.contrib import admin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'category', 'buying_price', 'selling_price', 'quantity', 'low_stock_threshold', 'created_at']
    list_filter = ['category', 'unit', 'created_at']
    search_fields = ['name', 'sku', 'barcode']
    list_select_related = ['category']
