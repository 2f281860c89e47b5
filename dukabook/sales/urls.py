from django.urls import path
from .views import sale_list_create, sale_detail, sale_summary

urlpatterns = [
    path('sales/', sale_list_create, name='sale-list-create'),
    path('sales/summary/', sale_summary, name='sale-summary'),
    path('sales/<int:pk>/', sale_detail, name='sale-detail'),
]
