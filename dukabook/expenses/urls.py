from django.urls import path
from .views import expense_list_create, expense_detail, expense_summary

urlpatterns = [
    path('expenses/', expense_list_create, name='expense-list-create'),
    path('expenses/summary/', expense_summary, name='expense-summary'),
    path('expenses/<int:pk>/', expense_detail, name='expense-detail'),
]
