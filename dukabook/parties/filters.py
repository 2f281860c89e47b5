import django_filters
from django.conf import settings
from django.db.models import Q, F
from django.utils import timezone
from datetime import datetime, time, timedelta

from .models import Debtor, Supplier
from .services import high_risk_q
from .utils import (
    DEBTOR_STATUS_CHOICES, STATUS_ACTIVE, STATUS_OVERDUE, STATUS_HIGH_RISK, STATUS_AT_LIMIT,
)


class DebtorFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.ChoiceFilter(choices=DEBTOR_STATUS_CHOICES, method='filter_status')

    class Meta:
        model = Debtor
        fields = ['search', 'status']

    def filter_search(self, queryset, name, value):
        search = (value or '').strip()
        if not search:
            return queryset
        return queryset.filter(
            Q(name__icontains=search) |
            Q(phone__icontains=search) |
            Q(email__icontains=search)
        )

    def filter_status(self, queryset, name, value):
        if value == STATUS_ACTIVE:
            return queryset.filter(is_active=True)
        if value == STATUS_HIGH_RISK:
            return high_risk_q(queryset)
        if value == STATUS_AT_LIMIT:
            return queryset.filter(credit_limit__gt=0, outstanding_balance__gte=F('credit_limit'))
        if value == STATUS_OVERDUE:
            return overdue_q(queryset)
        return queryset


def overdue_q(queryset, today=None):
    """Debtors with debt whose due date (or created + DEBTOR_DUE_DAYS) is before today"""
    today = today or timezone.localdate()
    start_of_today = timezone.make_aware(datetime.combine(today, time.min))
    created_cutoff = start_of_today - timedelta(days=settings.DEBTOR_DUE_DAYS)
    return queryset.filter(outstanding_balance__gt=0).filter(
        Q(due_date__isnull=False, due_date__lt=today) |
        Q(due_date__isnull=True, created_at__lt=created_cutoff)
    )


class SupplierFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.ChoiceFilter(choices=Supplier.STATUS_CHOICES)

    class Meta:
        model = Supplier
        fields = ['search', 'status']

    def filter_search(self, queryset, name, value):
        search = (value or '').strip()
        if not search:
            return queryset
        return queryset.filter(
            Q(name__icontains=search) |
            Q(email__icontains=search) |
            Q(phone__icontains=search) |
            Q(contact_person__icontains=search)
        )
