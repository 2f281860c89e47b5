"""
Balance-changing operations on debtors.

The debtor row is locked while its outstanding balance changes.
"""
import logging

from django.db import transaction
from django.db.models import Sum, Count, Q, F
from django.utils import timezone
from datetime import timedelta
from decimal import Decimal

from .models import Debtor, Payment

logger = logging.getLogger('dukabook.parties')


class OverpaymentError(ValueError):
    """Raised when a payment exceeds the debtor's outstanding balance"""
    def __init__(self, debtor, amount):
        self.debtor = debtor
        self.amount = amount
        super().__init__(
            f"Payment of {amount} exceeds outstanding balance of {debtor.outstanding_balance} for {debtor.name}"
        )


def record_payment(debtor_id, amount, payment_method='Cash', reference_number=None, notes=None, user=None):
    """Record a payment and reduce the debtor's outstanding balance"""
    with transaction.atomic():
        debtor = Debtor.objects.select_for_update().get(pk=debtor_id)
        if amount > debtor.outstanding_balance:
            raise OverpaymentError(debtor, amount)
        payment = Payment.objects.create(
            debtor=debtor,
            amount=amount,
            payment_method=payment_method,
            reference_number=reference_number or None,
            notes=notes or None,
            created_by=user,
        )
        debtor.outstanding_balance -= amount
        debtor.save(update_fields=['outstanding_balance', 'updated_at'])

    logger.info(f"Payment recorded: {amount} from {debtor.name}; outstanding now {debtor.outstanding_balance}")
    return debtor, payment


def add_debt(debtor_id, amount, due_date=None, notes=None):
    """Increase a debtor's outstanding balance"""
    with transaction.atomic():
        debtor = Debtor.objects.select_for_update().get(pk=debtor_id)
        debtor.outstanding_balance += amount
        update_fields = ['outstanding_balance', 'updated_at']
        if due_date is not None:
            debtor.due_date = due_date
            update_fields.append('due_date')
        if notes:
            debtor.notes = f"{debtor.notes}\n{notes}" if debtor.notes else notes
            update_fields.append('notes')
        debtor.save(update_fields=update_fields)

    if debtor.credit_limit > 0 and debtor.outstanding_balance > debtor.credit_limit:
        logger.warning(f"Debtor {debtor.name} is over the credit limit ({debtor.outstanding_balance} > {debtor.credit_limit})")
    logger.info(f"Debt added: {amount} to {debtor.name}; outstanding now {debtor.outstanding_balance}")
    return debtor


def get_debtor_summary(now=None):
    now = timezone.localtime(now or timezone.now())
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    totals = Debtor.objects.aggregate(
        total_outstanding=Sum('outstanding_balance'),
        debtor_count=Count('id'),
        active_count=Count('id', filter=Q(is_active=True)),
    )
    payments_today = Payment.objects.filter(
        created_at__gte=start_of_day, created_at__lt=start_of_day + timedelta(days=1)
    ).aggregate(total=Sum('amount'), count=Count('id'))
    return {
        'total_outstanding': totals['total_outstanding'] or Decimal('0.00'),
        'high_risk_count': high_risk_q(Debtor.objects.all()).count(),
        'todays_payments_total': payments_today['total'] or Decimal('0.00'),
        'todays_payments_count': payments_today['count'] or 0,
        'debtor_count': totals['debtor_count'] or 0,
        'active_count': totals['active_count'] or 0,
    }


def high_risk_q(queryset):
    """Debtors with debt and either no limit or at least 80% of it used"""
    return queryset.filter(outstanding_balance__gt=0).filter(
        Q(credit_limit__lte=0) | Q(outstanding_balance__gte=F('credit_limit') * Decimal('0.8'))
    )
