from django.conf import settings
from django.db import models


class Expense(models.Model):
    """Business expenses"""
    CATEGORY_CHOICES = [
        ('Rent', 'Rent'),
        ('Utilities', 'Utilities'),
        ('Salaries', 'Salaries'),
        ('Supplies', 'Supplies'),
        ('Marketing', 'Marketing'),
        ('Transportation', 'Transportation'),
        ('Maintenance', 'Maintenance'),
        ('Other', 'Other'),
    ]

    PAYMENT_METHOD_CHOICES = [
        ('Cash', 'Cash'),
        ('M-Pesa', 'M-Pesa'),
        ('Bank Transfer', 'Bank Transfer'),
        ('Credit Card', 'Credit Card'),
        ('Cheque', 'Cheque'),
    ]

    category = models.CharField(max_length=50, choices=CATEGORY_CHOICES, db_index=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(blank=True, null=True)
    expense_date = models.DateField(db_index=True)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='Cash')
    vendor = models.CharField(max_length=200, blank=True, null=True)
    reference_number = models.CharField(max_length=100, blank=True, null=True)
    is_recurring = models.BooleanField(default=False)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.category} - {self.amount} ({self.expense_date})"

    class Meta:
        db_table = 'expenses'
        ordering = ['-expense_date', '-created_at']
