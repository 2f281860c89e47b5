from django.urls import path
from .views import (
    category_list_create, category_detail,
    product_list_create, product_detail, product_summary,
    product_import_template, product_bulk_import,
)

urlpatterns = [
    # Category endpoints
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', category_detail, name='category-detail'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/summary/', product_summary, name='product-summary'),
    path('products/import-template/', product_import_template, name='product-import-template'),
    path('products/bulk-import/', product_bulk_import, name='product-bulk-import'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
]
