"""
Stock movement services shared by inventory, sales and catalog views.

Every function that changes a product's quantity locks the product row and
writes the matching InventoryTransaction in the same transaction.
"""
import logging

from django.db import transaction
from django.db.models import Sum, Count, Q, F, Case, When, DecimalField, ExpressionWrapper
from decimal import Decimal

from dukabook.catalog.models import Product
from dukabook.catalog.utils import get_stock_status
from .models import InventoryTransaction

logger = logging.getLogger('dukabook.inventory')

ADJUSTMENT_REASON_CHOICES = [
    ('restock', 'Restock'),
    ('damaged', 'Damaged'),
    ('expired', 'Expired'),
    ('found', 'Found'),
    ('theft', 'Theft'),
    ('correction', 'Correction'),
    ('other', 'Other'),
]


class InsufficientStockError(ValueError):
    """Raised when a movement would take more stock than is on hand"""
    def __init__(self, product, requested):
        self.product = product
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product.name}. Available: {product.quantity}, requested: {requested}"
        )


class InventoryInitializationError(ValueError):
    """Raised when initial stock movements cannot be written"""


def record_movement(product, transaction_type, quantity, reference_id=None, notes=None, user=None):
    return InventoryTransaction.objects.create(
        product=product,
        transaction_type=transaction_type,
        quantity=quantity,
        reference_id=str(reference_id) if reference_id is not None else None,
        notes=notes,
        created_by=user,
    )


def take_stock(product, quantity):
    """Decrease a locked product's stock, refusing to go below zero"""
    if quantity > product.quantity:
        raise InsufficientStockError(product, quantity)
    product.quantity -= quantity
    product.save(update_fields=['quantity', 'updated_at'])


def return_stock(product, quantity):
    product.quantity += quantity
    product.save(update_fields=['quantity', 'updated_at'])


def adjust_stock(product_id, direction, quantity, reason, notes=None, user=None):
    """
    Apply a manual stock in/out adjustment.

    Returns (product, transaction). Stock out beyond the quantity on hand
    raises InsufficientStockError.
    """
    reason_label = dict(ADJUSTMENT_REASON_CHOICES).get(reason, reason)
    movement_notes = f"{reason_label}: {notes}" if notes else reason_label

    with transaction.atomic():
        product = Product.objects.select_for_update().get(pk=product_id)
        if direction == 'out':
            take_stock(product, quantity)
            signed = -quantity
        else:
            return_stock(product, quantity)
            signed = quantity
        movement = record_movement(
            product, 'adjustment', signed, notes=movement_notes, user=user
        )

    logger.info(f"Stock {direction} {quantity} for {product.name} ({reason}); now {product.quantity}")
    return product, movement


def initialize_inventory(user=None):
    """
    Write one 'Initial stock' purchase movement per product with stock.

    Refused when movements already exist or when no product has stock.
    """
    with transaction.atomic():
        if InventoryTransaction.objects.exists():
            raise InventoryInitializationError('Inventory already has stock movements.')
        products = list(Product.objects.select_for_update().filter(quantity__gt=0))
        if not products:
            raise InventoryInitializationError('No stock to initialize. All products currently have 0 quantity.')
        movements = InventoryTransaction.objects.bulk_create([
            InventoryTransaction(
                product=product,
                transaction_type='purchase',
                quantity=product.quantity,
                notes='Initial stock',
                created_by=user,
            )
            for product in products
        ])

    from dukabook.core.cache_signals import invalidate_reports_cache_manual
    invalidate_reports_cache_manual()

    logger.info(f"Initialized inventory with {len(movements)} movements")
    return movements


def get_inventory_overview():
    """Stock counts, stock value at cost and the latest movements"""
    value_expression = ExpressionWrapper(
        F('quantity') * Case(
            When(buying_price__gt=0, then=F('buying_price')),
            default=F('selling_price'),
        ),
        output_field=DecimalField(max_digits=20, decimal_places=2)
    )
    totals = Product.objects.aggregate(
        total=Count('id'),
        out_of_stock=Count('id', filter=Q(quantity__lte=0)),
        low_stock=Count('id', filter=Q(quantity__gt=0, quantity__lte=F('low_stock_threshold'))),
        inventory_value=Sum(value_expression, filter=Q(quantity__gt=0)),
    )
    total = totals['total'] or 0
    out_of_stock = totals['out_of_stock'] or 0
    low_stock = totals['low_stock'] or 0
    recent = InventoryTransaction.objects.select_related('product')[:5]
    return {
        'total_products': total,
        'out_of_stock': out_of_stock,
        'low_stock': low_stock,
        'in_stock': total - out_of_stock - low_stock,
        'inventory_value': totals['inventory_value'] or Decimal('0.00'),
        'recent_movements': list(recent),
        'has_movements': InventoryTransaction.objects.exists(),
    }


def get_stock_levels():
    products = Product.objects.select_related('category').order_by('name')
    return [
        {
            'id': product.id,
            'name': product.name,
            'sku': product.sku,
            'category_name': product.category.name if product.category else None,
            'quantity': product.quantity,
            'unit': product.unit,
            'low_stock_threshold': product.low_stock_threshold,
            'stock_status': get_stock_status(product.quantity, product.low_stock_threshold),
            'updated_at': product.updated_at,
        }
        for product in products
    ]
