from django.urls import path
from .views import (
    debtor_list_create, debtor_detail, debtor_summary, debtor_add_debt, debtor_payments,
    supplier_list_create, supplier_detail,
)

urlpatterns = [
    # Debtor endpoints
    path('debtors/', debtor_list_create, name='debtor-list-create'),
    path('debtors/summary/', debtor_summary, name='debtor-summary'),
    path('debtors/<int:pk>/', debtor_detail, name='debtor-detail'),
    path('debtors/<int:pk>/add-debt/', debtor_add_debt, name='debtor-add-debt'),
    path('debtors/<int:pk>/payments/', debtor_payments, name='debtor-payments'),

    # Supplier endpoints
    path('suppliers/', supplier_list_create, name='supplier-list-create'),
    path('suppliers/<int:pk>/', supplier_detail, name='supplier-detail'),
]
