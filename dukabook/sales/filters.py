import django_filters
from django.db.models import Q

from .models import Sale


class SaleFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')
    payment_method = django_filters.CharFilter(field_name='payment_method', lookup_expr='iexact')

    class Meta:
        model = Sale
        fields = ['search', 'date_from', 'date_to', 'payment_method']

    def filter_search(self, queryset, name, value):
        search = (value or '').strip()
        if not search:
            return queryset
        return queryset.filter(
            Q(sale_number__icontains=search) |
            Q(customer_name__icontains=search) |
            Q(customer_phone__icontains=search)
        )
