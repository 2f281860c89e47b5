import django_filters
from django.db.models import Q
from django.utils import timezone

from .models import Expense


class ExpenseFilter(django_filters.FilterSet):
    MONTH_CHOICES = [
        ('all', 'All'),
        ('current', 'Current Month'),
    ]

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.ChoiceFilter(choices=Expense.CATEGORY_CHOICES)
    month = django_filters.ChoiceFilter(choices=MONTH_CHOICES, method='filter_month')
    date_from = django_filters.DateFilter(field_name='expense_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='expense_date', lookup_expr='lte')

    class Meta:
        model = Expense
        fields = ['search', 'category', 'month', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        search = (value or '').strip()
        if not search:
            return queryset
        return queryset.filter(
            Q(category__icontains=search) |
            Q(description__icontains=search) |
            Q(vendor__icontains=search)
        )

    def filter_month(self, queryset, name, value):
        if value == 'current':
            today = timezone.localdate()
            return queryset.filter(expense_date__year=today.year, expense_date__month=today.month)
        return queryset
