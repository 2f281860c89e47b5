from django.conf import settings
from django.db import models
from decimal import Decimal

from .utils import get_stock_status, get_profit_and_margin


class Category(models.Model):
    """Product categories"""
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='categories')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Product(models.Model):
    """Product master with its current stock on hand"""
    name = models.CharField(max_length=200, db_index=True)
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    sku = models.CharField(max_length=100, unique=True, blank=True, null=True, db_index=True)
    barcode = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    description = models.TextField(blank=True, null=True)
    buying_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    selling_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    quantity = models.IntegerField(default=0)
    unit = models.CharField(max_length=20, default='pcs')
    low_stock_threshold = models.IntegerField(default=5)
    image_url = models.URLField(max_length=500, blank=True, null=True)  # plain URL, no upload
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku or 'NO-SKU'})"

    @property
    def stock_status(self):
        return get_stock_status(self.quantity, self.low_stock_threshold)

    @property
    def profit(self):
        return get_profit_and_margin(self.buying_price, self.selling_price)[0]

    @property
    def margin(self):
        return get_profit_and_margin(self.buying_price, self.selling_price)[1]

    @property
    def stock_value(self):
        """Value of stock on hand at cost, falling back to the selling price"""
        unit_value = self.buying_price if self.buying_price else self.selling_price
        return (unit_value or Decimal('0.00')) * self.quantity

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']
