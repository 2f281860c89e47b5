from django.conf import settings
from django.db import models
from decimal import Decimal

from .utils import (
    get_available_credit, get_credit_ratio, get_risk_level, get_effective_due_date, is_overdue,
)

PAYMENT_METHOD_CHOICES = [
    ('Cash', 'Cash'),
    ('M-Pesa', 'M-Pesa'),
    ('Bank Transfer', 'Bank Transfer'),
    ('Credit Card', 'Credit Card'),
    ('Cheque', 'Cheque'),
]


class Debtor(models.Model):
    """Credit customers"""
    PAYMENT_TYPE_CHOICES = [
        ('FULL', 'Full Payment'),
        ('INSTALLMENT', 'Installments'),
        ('CUSTOM', 'Custom Schedule'),
    ]

    PAYMENT_FREQUENCY_CHOICES = [
        ('Monthly', 'Monthly'),
        ('Weekly', 'Weekly'),
        ('Bi-weekly', 'Bi-weekly'),
        ('Quarterly', 'Quarterly'),
    ]

    name = models.CharField(max_length=200, db_index=True)
    phone = models.CharField(max_length=20)
    email = models.EmailField(blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    credit_limit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    outstanding_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    due_date = models.DateField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    payment_type = models.CharField(max_length=20, choices=PAYMENT_TYPE_CHOICES, default='FULL')
    installment_amount = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    payment_frequency = models.CharField(max_length=20, choices=PAYMENT_FREQUENCY_CHOICES, blank=True, null=True)
    custom_schedule = models.JSONField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='debtors')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def available_credit(self):
        return get_available_credit(self.outstanding_balance, self.credit_limit)

    @property
    def credit_ratio(self):
        return get_credit_ratio(self.outstanding_balance, self.credit_limit)

    @property
    def risk_level(self):
        return get_risk_level(self.outstanding_balance, self.credit_limit)

    @property
    def effective_due_date(self):
        return get_effective_due_date(self.due_date, self.created_at)

    @property
    def is_overdue(self):
        return is_overdue(self.outstanding_balance, self.due_date, self.created_at)

    class Meta:
        db_table = 'debtors'
        ordering = ['-created_at']


class Payment(models.Model):
    """Payments received from debtors"""
    debtor = models.ForeignKey(Debtor, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='Cash')
    reference_number = models.CharField(max_length=100, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='debtor_payments')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"{self.debtor.name} - {self.amount}"

    class Meta:
        db_table = 'payments'
        ordering = ['-created_at', '-id']


class Supplier(models.Model):
    """Suppliers"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('pending', 'Pending'),
    ]

    name = models.CharField(max_length=200, db_index=True)
    contact_person = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=20)
    address = models.TextField()
    city = models.CharField(max_length=100)
    country = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    tax_id = models.CharField(max_length=50, blank=True, null=True)
    website = models.URLField(blank=True)
    categories = models.JSONField(default=list)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    payment_terms = models.CharField(max_length=50, default='Net 30')
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='suppliers')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'suppliers'
        ordering = ['name']
