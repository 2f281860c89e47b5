"""
Dashboard and report builders.

Builders return plain dicts and are cached per day through cached_query;
every write to a source model bumps the reports cache version.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.db.models import Sum, Count, F
from django.db.models.functions import TruncDate
from django.utils import timezone

from dukabook.catalog.models import Product
from dukabook.core.cache_utils import cached_query
from dukabook.expenses.models import Expense
from dukabook.sales.models import Sale, SaleItem
from .periods import get_period, pct_change, days_between

logger = logging.getLogger('dukabook.reports')

ZERO = Decimal('0.00')
TOP_PRODUCTS_LIMIT = 5


def _sales_totals(queryset):
    totals = queryset.aggregate(total=Sum('total'), count=Count('id'))
    return totals['total'] or ZERO, totals['count'] or 0


def _expense_total(queryset):
    return queryset.aggregate(total=Sum('amount'))['total'] or ZERO


@cached_query('dashboard')
def build_dashboard(today):
    """
    Headline numbers for today and the last seven days.

    `today` is a date; it is part of the cache key so a new day starts with
    a fresh entry.
    """
    period = get_period('weekly', today)
    today_period = get_period('today', today)

    today_sales = Sale.objects.filter(created_at__gte=today_period['start'], created_at__lte=today_period['end'])
    today_sales_total, today_sales_count = _sales_totals(today_sales)
    today_expenses = _expense_total(Expense.objects.filter(expense_date=today))

    week_sales_total, week_sales_count = _sales_totals(Sale.objects.filter(created_at__gte=period['start']))
    week_expenses = _expense_total(Expense.objects.filter(expense_date__gte=period['start'].date()))

    top_products = (
        SaleItem.objects.filter(created_at__gte=period['start'])
        .exclude(product_name='')
        .values('product_name')
        .annotate(quantity=Sum('quantity'))
        .order_by('-quantity', 'product_name')[:TOP_PRODUCTS_LIMIT]
    )

    low_stock = (
        Product.objects.filter(quantity__gt=0, quantity__lte=F('low_stock_threshold'))
        .order_by('quantity', 'name')
        .values('id', 'name', 'quantity', 'low_stock_threshold')
    )

    return {
        'today_sales_total': today_sales_total,
        'today_sales_count': today_sales_count,
        'today_expenses_total': today_expenses,
        'today_profit': today_sales_total - today_expenses,
        'week_sales_total': week_sales_total,
        'week_sales_count': week_sales_count,
        'week_expenses_total': week_expenses,
        'week_net_balance': week_sales_total - week_expenses,
        'top_products': [{'name': row['product_name'], 'quantity': row['quantity']} for row in top_products],
        'low_stock_products': list(low_stock),
        'total_products': Product.objects.count(),
    }


def _daily_series(period):
    sales_by_day = {
        row['day']: row['total']
        for row in Sale.objects.filter(created_at__gte=period['start'], created_at__lte=period['end'])
        .annotate(day=TruncDate('created_at'))
        .values('day')
        .annotate(total=Sum('total'))
    }
    expenses_by_day = {
        row['expense_date']: row['total']
        for row in Expense.objects.filter(
            expense_date__gte=period['start'].date(), expense_date__lte=period['end'].date()
        ).values('expense_date').annotate(total=Sum('amount'))
    }
    return [
        {
            'date': day,
            'sales': sales_by_day.get(day) or ZERO,
            'expenses': expenses_by_day.get(day) or ZERO,
        }
        for day in days_between(period['start'], period['end'])
    ]


def current_sales(period):
    return Sale.objects.filter(created_at__gte=period['start'], created_at__lte=period['end'])


@cached_query('period_summary')
def build_period_summary(preset, today):
    """Current vs previous period figures for one preset"""
    period = get_period(preset, today)

    current = current_sales(period)
    previous = Sale.objects.filter(created_at__gte=period['prev_start'], created_at__lt=period['prev_end'])
    curr_sales, curr_count = _sales_totals(current)
    prev_sales, prev_count = _sales_totals(previous)

    curr_expenses = _expense_total(Expense.objects.filter(
        expense_date__gte=period['start'].date(), expense_date__lte=period['end'].date()
    ))
    prev_expenses = _expense_total(Expense.objects.filter(
        expense_date__gte=period['prev_start'].date(), expense_date__lt=period['prev_end'].date()
    ))
    curr_profit = curr_sales - curr_expenses
    prev_profit = prev_sales - prev_expenses

    payment_mix = list(
        current.values('payment_method').annotate(count=Count('id')).order_by('-count', 'payment_method')
    )
    cash_count = sum(row['count'] for row in payment_mix if (row['payment_method'] or '').lower() == 'cash')

    stock = Product.objects.aggregate(total=Sum('quantity'))['total'] or 0
    top_product = Product.objects.order_by('-quantity', 'name').values('name', 'quantity').first()
    top_share = 0.0
    if stock > 0 and top_product:
        top_share = round(top_product['quantity'] / stock * 100, 2)

    return {
        'preset': preset,
        'period': {
            'start': period['start'],
            'end': period['end'],
            'previous_start': period['prev_start'],
            'previous_end': period['prev_end'],
        },
        'sales': {'current': curr_sales, 'previous': prev_sales, 'change_pct': pct_change(curr_sales, prev_sales)},
        'expenses': {'current': curr_expenses, 'previous': prev_expenses},
        'profit': {'current': curr_profit, 'previous': prev_profit, 'change_pct': pct_change(curr_profit, prev_profit)},
        'transactions': {'current': curr_count, 'previous': prev_count, 'change_pct': pct_change(curr_count, prev_count)},
        'average_sale_value': (curr_sales / curr_count).quantize(Decimal('0.01')) if curr_count else ZERO,
        'payment_mix': payment_mix,
        'cash_share_pct': round(cash_count / curr_count * 100, 2) if curr_count else 0.0,
        'inventory_top_product': top_product['name'] if top_product else None,
        'inventory_top_share_pct': top_share,
        'daily': _daily_series(period),
    }
