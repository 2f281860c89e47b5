from django.contrib import admin
from .models import Debtor, Payment, Supplier


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    readonly_fields = ['amount', 'payment_method', 'reference_number', 'created_at']


@admin.register(Debtor)
class DebtorAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'credit_limit', 'outstanding_balance', 'due_date', 'payment_type', 'is_active']
    list_filter = ['is_active', 'payment_type']
    search_fields = ['name', 'phone', 'email']
    inlines = [PaymentInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['debtor', 'amount', 'payment_method', 'reference_number', 'created_at']
    list_filter = ['payment_method', 'created_at']
    search_fields = ['debtor__name', 'reference_number']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_person', 'email', 'phone', 'city', 'status', 'payment_terms']
    list_filter = ['status', 'country']
    search_fields = ['name', 'contact_person', 'email', 'phone']
