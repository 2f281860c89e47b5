import django_filters
from django.db.models import Q, F

from .models import Product
from .utils import STOCK_STATUS_CHOICES, IN_STOCK, LOW_STOCK, OUT_OF_STOCK


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    # Searches name, SKU and barcode
    search = django_filters.CharFilter(method='filter_search', label='Search')

    category = django_filters.NumberFilter(field_name='category_id', lookup_expr='exact')
    category_name = django_filters.CharFilter(field_name='category__name', lookup_expr='iexact')
    stock_status = django_filters.ChoiceFilter(choices=STOCK_STATUS_CHOICES, method='filter_stock_status')

    class Meta:
        model = Product
        fields = ['search', 'category', 'category_name', 'stock_status']

    def filter_search(self, queryset, name, value):
        search = (value or '').strip()
        if not search:
            return queryset
        return queryset.filter(
            Q(name__icontains=search) |
            Q(sku__icontains=search) |
            Q(barcode__icontains=search)
        )

    def filter_stock_status(self, queryset, name, value):
        return filter_by_stock_status(queryset, value)


def filter_by_stock_status(queryset, value):
    """Restrict a product queryset to one stock status"""
    if value == OUT_OF_STOCK:
        return queryset.filter(quantity__lte=0)
    if value == LOW_STOCK:
        return queryset.filter(quantity__gt=0, quantity__lte=F('low_stock_threshold'))
    if value == IN_STOCK:
        return queryset.filter(quantity__gt=0).filter(quantity__gt=F('low_stock_threshold'))
    return queryset
