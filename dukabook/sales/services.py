"""
Sale recording and reversal.

Both operations change product stock and write inventory movements, so they
run inside one transaction with the affected product rows locked.
"""
import logging
import random

from django.db import transaction
from django.db.models import Sum, Count, F, DecimalField, ExpressionWrapper
from django.utils import timezone
from decimal import Decimal, ROUND_HALF_UP

from dukabook.catalog.models import Product
from dukabook.inventory.services import record_movement, take_stock, return_stock
from .models import Sale, SaleItem

logger = logging.getLogger('dukabook.sales')

CENTS = Decimal('0.01')


class InvalidSaleError(ValueError):
    """Raised when sale totals do not make sense"""


def money(value):
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def generate_sale_number(now=None):
    """SALE-YYYYMMDDHHMMSS-NNN, unique among existing sales"""
    stamp = (now or timezone.now()).strftime('%Y%m%d%H%M%S')
    sale_number = f"SALE-{stamp}-{random.randint(0, 999):03d}"
    while Sale.objects.filter(sale_number=sale_number).exists():
        sale_number = f"SALE-{stamp}-{random.randint(0, 999):03d}"
    return sale_number


def calculate_totals(lines, tax_rate, discount_amount):
    """
    lines: iterable of (quantity, unit_price).

    Returns (subtotal, tax_amount, total).
    """
    subtotal = sum((money(Decimal(qty) * Decimal(price)) for qty, price in lines), Decimal('0.00'))
    tax_amount = money(subtotal * Decimal(tax_rate) / 100)
    total = subtotal + tax_amount - money(discount_amount)
    return subtotal, tax_amount, total


def record_sale(items, user=None, customer_name=None, customer_phone=None, customer_email=None,
                payment_method='Cash', tax_rate=Decimal('0.00'), discount_amount=Decimal('0.00'), notes=None):
    """
    Record a sale with one or more items.

    items: list of dicts with `product` (Product), `quantity` and optional
    `unit_price` / `notes`. Unit price defaults to the product's selling
    price. Raises InsufficientStockError when any product lacks stock.
    """
    discount_amount = money(discount_amount or 0)
    tax_rate = Decimal(tax_rate or 0)

    with transaction.atomic():
        product_ids = sorted({item['product'].pk for item in items})
        products = {p.pk: p for p in Product.objects.select_for_update().filter(pk__in=product_ids).order_by('pk')}

        lines = []
        for item in items:
            product = products[item['product'].pk]
            unit_price = item.get('unit_price')
            if unit_price is None:
                unit_price = product.selling_price
            lines.append((product, item['quantity'], money(unit_price), item.get('notes')))

        subtotal, tax_amount, total = calculate_totals(
            [(qty, price) for _, qty, price, _ in lines], tax_rate, discount_amount
        )
        if total < 0:
            raise InvalidSaleError('Discount cannot exceed the sale amount.')

        sale = Sale.objects.create(
            sale_number=generate_sale_number(),
            customer_name=customer_name or None,
            customer_phone=customer_phone or None,
            customer_email=customer_email or None,
            payment_method=payment_method,
            tax_rate=tax_rate,
            subtotal=subtotal,
            discount_amount=discount_amount,
            tax_amount=tax_amount,
            total=total,
            notes=notes or None,
            created_by=user,
        )

        for product, quantity, unit_price, item_notes in lines:
            take_stock(product, quantity)
            SaleItem.objects.create(
                sale=sale,
                product=product,
                product_name=product.name,
                quantity=quantity,
                unit_price=unit_price,
                line_total=money(quantity * unit_price),
                notes=item_notes or None,
            )
            record_movement(
                product, 'sale', quantity,
                reference_id=sale.id, notes=f"Sale {sale.sale_number}", user=user
            )

    logger.info(f"Sale recorded: {sale.sale_number} ({len(lines)} items, total {sale.total})")
    return sale


def delete_sale(sale, user=None):
    """Delete a sale and put its items back into stock"""
    sale_number = sale.sale_number
    with transaction.atomic():
        items = list(sale.items.all())
        product_ids = sorted({item.product_id for item in items if item.product_id})
        products = {p.pk: p for p in Product.objects.select_for_update().filter(pk__in=product_ids).order_by('pk')}
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                continue
            return_stock(product, item.quantity)
            record_movement(
                product, 'return', item.quantity,
                reference_id=sale.id, notes=f"Sale {sale_number} deleted", user=user
            )
        sale.delete()

    logger.info(f"Sale deleted: {sale_number} ({len(items)} items restocked)")
    return items


def item_preview(sale):
    """One-line description of a sale's items, e.g. 'Bread x 2 +1 more'"""
    items = list(sale.items.all())
    if not items:
        return ''
    first = items[0]
    preview = f"{first.product_name} x {first.quantity}"
    if len(items) > 1:
        preview += f" +{len(items) - 1} more"
    return preview


def get_sales_summary(now=None):
    now = timezone.localtime(now or timezone.now())
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    start_of_month = start_of_day.replace(day=1)

    today = Sale.objects.filter(created_at__gte=start_of_day, created_at__lte=now).aggregate(
        revenue=Sum('total'), count=Count('id')
    )
    month = Sale.objects.filter(created_at__gte=start_of_month, created_at__lte=now).aggregate(
        revenue=Sum('total'), count=Count('id')
    )

    cost_expression = ExpressionWrapper(
        F('quantity') * F('product__buying_price'),
        output_field=DecimalField(max_digits=20, decimal_places=2)
    )
    today_items = SaleItem.objects.filter(sale__created_at__gte=start_of_day, sale__created_at__lte=now).aggregate(
        revenue=Sum('line_total'), cost=Sum(cost_expression)
    )
    today_profit = (today_items['revenue'] or Decimal('0.00')) - (today_items['cost'] or Decimal('0.00'))

    latest = Sale.objects.prefetch_related('items').first()
    return {
        'today_revenue': today['revenue'] or Decimal('0.00'),
        'today_count': today['count'] or 0,
        'month_revenue': month['revenue'] or Decimal('0.00'),
        'month_count': month['count'] or 0,
        'today_profit': today_profit,
        'latest_sale': latest,
        'latest_sale_preview': item_preview(latest) if latest else '',
    }
