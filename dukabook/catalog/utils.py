"""
Utility functions for catalog operations
"""
import random
import time
from decimal import Decimal, ROUND_HALF_UP

OUT_OF_STOCK = 'out_of_stock'
LOW_STOCK = 'low_stock'
IN_STOCK = 'in_stock'

STOCK_STATUS_CHOICES = [
    (IN_STOCK, 'In Stock'),
    (LOW_STOCK, 'Low Stock'),
    (OUT_OF_STOCK, 'Out of Stock'),
]


def get_stock_status(quantity, threshold):
    """Classify a stock level against its low stock threshold"""
    quantity = quantity or 0
    if quantity <= 0:
        return OUT_OF_STOCK
    if quantity <= (threshold or 0):
        return LOW_STOCK
    return IN_STOCK


def get_profit_and_margin(buying_price, selling_price):
    """
    Return (profit, margin percent) for one unit.

    Margin is measured against the selling price and is 0 when the product
    is sold for nothing.
    """
    buying_price = Decimal(buying_price or 0)
    selling_price = Decimal(selling_price or 0)
    profit = selling_price - buying_price
    if selling_price == 0:
        return profit, Decimal('0.00')
    margin = (profit / selling_price * 100).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return profit, margin


def generate_import_sku():
    """Generate a SKU for an imported row that did not carry one"""
    millis = int(time.time() * 1000)
    return f"SKU-{millis}-{random.getrandbits(48):x}"
