from django.contrib import admin
from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['expense_date', 'category', 'amount', 'payment_method', 'vendor', 'is_recurring']
    list_filter = ['category', 'payment_method', 'is_recurring', 'expense_date']
    search_fields = ['description', 'vendor', 'reference_number']
    date_hierarchy = 'expense_date'
