"""
Credit helpers for debtors.

These work on plain values so list views, detail views and reports all
classify a debtor the same way.
"""
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

RISK_HIGH = 'HIGH'
RISK_MEDIUM = 'MEDIUM'
RISK_LOW = 'LOW'

HIGH_RISK_RATIO = Decimal('0.8')

STATUS_ALL = 'all'
STATUS_ACTIVE = 'active'
STATUS_OVERDUE = 'overdue'
STATUS_HIGH_RISK = 'high_risk'
STATUS_AT_LIMIT = 'at_limit'

DEBTOR_STATUS_CHOICES = [
    (STATUS_ALL, 'All'),
    (STATUS_ACTIVE, 'Active'),
    (STATUS_OVERDUE, 'Overdue'),
    (STATUS_HIGH_RISK, 'High Risk'),
    (STATUS_AT_LIMIT, 'At Limit'),
]


def get_credit_ratio(outstanding, limit):
    """Share of the credit limit in use; 1 when there is debt but no limit"""
    outstanding = Decimal(outstanding or 0)
    limit = Decimal(limit or 0)
    if limit > 0:
        return outstanding / limit
    return Decimal('1') if outstanding > 0 else Decimal('0')


def get_risk_level(outstanding, limit):
    ratio = get_credit_ratio(outstanding, limit)
    if ratio >= 1:
        return RISK_HIGH
    if ratio >= HIGH_RISK_RATIO:
        return RISK_MEDIUM
    return RISK_LOW


def get_available_credit(outstanding, limit):
    return max(Decimal('0'), Decimal(limit or 0) - Decimal(outstanding or 0))


def get_effective_due_date(due_date, created_at):
    """The debtor's due date, or DEBTOR_DUE_DAYS after the debtor was created"""
    if due_date:
        return due_date
    if created_at is None:
        return None
    return timezone.localtime(created_at + timedelta(days=settings.DEBTOR_DUE_DAYS)).date()


def is_high_risk(outstanding, limit):
    outstanding = Decimal(outstanding or 0)
    limit = Decimal(limit or 0)
    if outstanding <= 0:
        return False
    if limit <= 0:
        return True
    return outstanding / limit >= HIGH_RISK_RATIO


def is_at_limit(outstanding, limit):
    limit = Decimal(limit or 0)
    if limit <= 0:
        return False
    return Decimal(outstanding or 0) >= limit


def is_overdue(outstanding, due_date, created_at, today=None):
    if Decimal(outstanding or 0) <= 0:
        return False
    effective = get_effective_due_date(due_date, created_at)
    if effective is None:
        return False
    today = today or timezone.localdate()
    return effective < today
