from django.conf import settings
from django.db import models

from dukabook.catalog.models import Product


class InventoryTransaction(models.Model):
    """
    Stock movement log.

    `quantity` is the size of the movement. Purchases and returns add stock,
    sales remove it. Adjustments carry a sign: positive for stock in,
    negative for stock out.
    """
    TRANSACTION_TYPE_CHOICES = [
        ('purchase', 'Purchase'),
        ('sale', 'Sale'),
        ('adjustment', 'Adjustment'),
        ('return', 'Return'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='inventory_transactions')
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES, db_index=True)
    quantity = models.IntegerField()
    reference_id = models.CharField(max_length=100, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_transactions')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"{self.transaction_type} {self.quantity} x {self.product_id}"

    @property
    def stock_delta(self):
        if self.transaction_type == 'sale':
            return -abs(self.quantity)
        if self.transaction_type == 'adjustment':
            return self.quantity
        return abs(self.quantity)

    class Meta:
        db_table = 'inventory_transactions'
        ordering = ['-created_at', '-id']
