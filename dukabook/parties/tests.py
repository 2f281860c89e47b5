"""
Comprehensive test suite for Parties module
Tests: Credit Helpers, Debtors, Status Filters, Payments, Add Debt, Suppliers
"""
from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from dukabook.core.test_utils import TestDataFactory, APITestCase
from dukabook.parties.filters import overdue_q
from dukabook.parties.models import Debtor, Payment, Supplier
from dukabook.parties.services import record_payment, add_debt, get_debtor_summary, OverpaymentError
from dukabook.parties.utils import (
    get_credit_ratio, get_risk_level, get_available_credit, is_high_risk, is_at_limit, is_overdue,
    get_effective_due_date, RISK_HIGH, RISK_MEDIUM, RISK_LOW,
)


class CreditHelperTests(TestCase):
    """Test debtor credit classification helpers"""

    def test_credit_ratio(self):
        """Test ratio with and without a credit limit"""
        self.assertEqual(get_credit_ratio(Decimal('250'), Decimal('1000')), Decimal('0.25'))
        self.assertEqual(get_credit_ratio(Decimal('10'), Decimal('0')), Decimal('1'))
        self.assertEqual(get_credit_ratio(Decimal('0'), Decimal('0')), Decimal('0'))

    def test_risk_level(self):
        """Test LOW below 80%, MEDIUM from 80% and HIGH at the limit"""
        self.assertEqual(get_risk_level(Decimal('799'), Decimal('1000')), RISK_LOW)
        self.assertEqual(get_risk_level(Decimal('800'), Decimal('1000')), RISK_MEDIUM)
        self.assertEqual(get_risk_level(Decimal('1000'), Decimal('1000')), RISK_HIGH)
        self.assertEqual(get_risk_level(Decimal('5'), Decimal('0')), RISK_HIGH)

    def test_available_credit_never_negative(self):
        """Test available credit floors at zero"""
        self.assertEqual(get_available_credit(Decimal('1200'), Decimal('1000')), Decimal('0'))
        self.assertEqual(get_available_credit(Decimal('200'), Decimal('1000')), Decimal('800'))

    def test_high_risk_and_at_limit(self):
        """Test high risk and at-limit flags"""
        self.assertTrue(is_high_risk(Decimal('800'), Decimal('1000')))
        self.assertFalse(is_high_risk(Decimal('0'), Decimal('0')))
        self.assertTrue(is_high_risk(Decimal('1'), Decimal('0')))
        self.assertTrue(is_at_limit(Decimal('1000'), Decimal('1000')))
        self.assertFalse(is_at_limit(Decimal('1000'), Decimal('0')))

    def test_overdue(self):
        """Test overdue uses the due date, or creation plus the default term"""
        today = date(2024, 6, 15)
        self.assertTrue(is_overdue(Decimal('10'), date(2024, 6, 14), None, today=today))
        self.assertFalse(is_overdue(Decimal('10'), date(2024, 6, 15), None, today=today))
        self.assertFalse(is_overdue(Decimal('0'), date(2024, 1, 1), None, today=today))

        created = timezone.now() - timedelta(days=45)
        self.assertTrue(is_overdue(Decimal('10'), None, created))
        self.assertEqual(
            get_effective_due_date(None, created),
            timezone.localtime(created + timedelta(days=30)).date()
        )


class DebtorServiceTests(TestCase):
    """Test balance-changing debtor services"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.debtor = TestDataFactory.create_debtor(name='Kamau', outstanding_balance=Decimal('500.00'))

    def test_record_payment(self):
        """Test a payment reduces the outstanding balance"""
        debtor, payment = record_payment(self.debtor.pk, Decimal('200.00'), payment_method='M-Pesa', user=self.user)
        self.assertEqual(debtor.outstanding_balance, Decimal('300.00'))
        self.assertEqual(payment.payment_method, 'M-Pesa')
        self.assertEqual(payment.created_by, self.user)

    def test_full_payment_clears_balance(self):
        """Test paying the whole balance"""
        debtor, _ = record_payment(self.debtor.pk, Decimal('500.00'))
        self.assertEqual(debtor.outstanding_balance, Decimal('0.00'))

    def test_overpayment_refused(self):
        """Test a payment cannot exceed the balance"""
        with self.assertRaises(OverpaymentError):
            record_payment(self.debtor.pk, Decimal('500.01'))
        self.debtor.refresh_from_db()
        self.assertEqual(self.debtor.outstanding_balance, Decimal('500.00'))
        self.assertEqual(Payment.objects.count(), 0)

    def test_add_debt(self):
        """Test adding debt, a new due date and notes"""
        due = timezone.localdate() + timedelta(days=14)
        debtor = add_debt(self.debtor.pk, Decimal('150.00'), due_date=due, notes='Bought on credit')
        self.assertEqual(debtor.outstanding_balance, Decimal('650.00'))
        self.assertEqual(debtor.due_date, due)
        self.assertIn('Bought on credit', debtor.notes)

    def test_debtor_summary(self):
        """Test outstanding total, high risk count and today's payments"""
        TestDataFactory.create_debtor(credit_limit=Decimal('100'), outstanding_balance=Decimal('90'))
        TestDataFactory.create_payment(self.debtor, Decimal('100'))
        summary = get_debtor_summary()
        self.assertEqual(summary['total_outstanding'], Decimal('490.00'))
        self.assertEqual(summary['high_risk_count'], 1)
        self.assertEqual(summary['todays_payments_total'], Decimal('100.00'))
        self.assertEqual(summary['todays_payments_count'], 1)
        self.assertEqual(summary['debtor_count'], 2)

    def test_overdue_queryset(self):
        """Test overdue filtering in the database matches the helper"""
        today = timezone.localdate()
        late = TestDataFactory.create_debtor(outstanding_balance=Decimal('50'), due_date=today - timedelta(days=1))
        TestDataFactory.create_debtor(outstanding_balance=Decimal('50'), due_date=today)
        TestDataFactory.create_debtor(outstanding_balance=Decimal('0'), due_date=today - timedelta(days=10))
        old = TestDataFactory.create_debtor(outstanding_balance=Decimal('50'))
        Debtor.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=40))

        overdue_ids = set(overdue_q(Debtor.objects.all()).values_list('id', flat=True))
        self.assertEqual(overdue_ids, {late.id, old.id})
        for debtor in Debtor.objects.all():
            self.assertEqual(debtor.is_overdue, debtor.id in overdue_ids)


class DebtorAPITests(APITestCase):
    """Test debtor endpoints"""

    def test_create_debtor(self):
        """Test creating a debtor with derived fields"""
        response = self.client.post('/api/v1/debtors/', {
            'name': 'Achieng',
            'phone': '0700111222',
            'credit_limit': '1000.00',
            'outstanding_balance': '850.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['risk_level'], RISK_MEDIUM)
        self.assertEqual(response.data['available_credit'], '150.00')
        self.assertEqual(response.data['payment_type'], 'FULL')

    def test_create_debtor_negative_limit(self):
        """Test negative credit limit is rejected"""
        response = self.client.post('/api/v1/debtors/', {
            'name': 'Achieng', 'phone': '0700111222', 'credit_limit': '-1'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('credit_limit', response.data)

    def test_schedule_fields_follow_payment_type(self):
        """Test installment fields are cleared for full payment debtors"""
        response = self.client.post('/api/v1/debtors/', {
            'name': 'Achieng',
            'phone': '0700111222',
            'payment_type': 'FULL',
            'installment_amount': '100.00',
            'payment_frequency': 'Weekly'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['installment_amount'])
        self.assertIsNone(response.data['payment_frequency'])

        response = self.client.post('/api/v1/debtors/', {
            'name': 'Mutua',
            'phone': '0700111333',
            'payment_type': 'INSTALLMENT',
            'installment_amount': '100.00',
            'payment_frequency': 'Weekly'
        }, format='json')
        self.assertEqual(response.data['installment_amount'], '100.00')

    def test_status_filters(self):
        """Test high risk, at limit and search filters"""
        TestDataFactory.create_debtor(name='Risky', credit_limit=Decimal('100'), outstanding_balance=Decimal('100'))
        TestDataFactory.create_debtor(name='Careful', credit_limit=Decimal('1000'), outstanding_balance=Decimal('10'))

        response = self.client.get('/api/v1/debtors/?status=high_risk')
        self.assertEqual([d['name'] for d in response.data], ['Risky'])

        response = self.client.get('/api/v1/debtors/?status=at_limit')
        self.assertEqual([d['name'] for d in response.data], ['Risky'])

        response = self.client.get('/api/v1/debtors/?search=care')
        self.assertEqual([d['name'] for d in response.data], ['Careful'])

        response = self.client.get('/api/v1/debtors/?status=unknown')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_record_payment_endpoint(self):
        """Test recording a payment and listing payments"""
        debtor = TestDataFactory.create_debtor(outstanding_balance=Decimal('300.00'))
        response = self.client.post(f'/api/v1/debtors/{debtor.id}/payments/', {
            'amount': '120.00',
            'payment_method': 'Cheque',
            'reference_number': 'CHQ-001'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['debtor']['outstanding_balance'], '180.00')
        self.assertEqual(response.data['payment']['debtor'], debtor.id)

        response = self.client.get(f'/api/v1/debtors/{debtor.id}/payments/')
        self.assertEqual(len(response.data), 1)

    def test_overpayment_endpoint(self):
        """Test overpayment is refused"""
        debtor = TestDataFactory.create_debtor(outstanding_balance=Decimal('50.00'))
        response = self.client.post(f'/api/v1/debtors/{debtor.id}/payments/', {'amount': '60.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('exceeds outstanding balance', response.data['error'])

    def test_zero_payment_rejected(self):
        """Test payment amount must be positive"""
        debtor = TestDataFactory.create_debtor(outstanding_balance=Decimal('50.00'))
        response = self.client.post(f'/api/v1/debtors/{debtor.id}/payments/', {'amount': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

    def test_add_debt_endpoint(self):
        """Test adding debt through the API"""
        debtor = TestDataFactory.create_debtor(outstanding_balance=Decimal('50.00'))
        response = self.client.post(f'/api/v1/debtors/{debtor.id}/add-debt/', {'amount': '25.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['outstanding_balance'], '75.50')

    def test_delete_debtor_removes_payments(self):
        """Test deleting a debtor cascades to payments"""
        debtor = TestDataFactory.create_debtor(outstanding_balance=Decimal('50.00'))
        TestDataFactory.create_payment(debtor, Decimal('10'))
        response = self.client.delete(f'/api/v1/debtors/{debtor.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(Payment.objects.count(), 0)

    def test_debtor_summary_endpoint(self):
        """Test the debtor summary"""
        TestDataFactory.create_debtor(outstanding_balance=Decimal('50.00'))
        response = self.client.get('/api/v1/debtors/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['debtor_count'], 1)


class SupplierAPITests(APITestCase):
    """Test supplier endpoints"""

    def _payload(self, **overrides):
        payload = {
            'name': 'Bidco Distributors',
            'contact_person': 'Jane Wanjiku',
            'email': 'orders@bidco.test',
            'phone': '0722000000',
            'address': 'Industrial Area',
            'city': 'Nairobi',
            'country': 'Kenya',
            'postal_code': '00100',
            'categories': ['Cooking Oil', ' Soap '],
        }
        payload.update(overrides)
        return payload

    def test_create_supplier(self):
        """Test creating a supplier with defaults"""
        response = self.client.post('/api/v1/suppliers/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['categories'], ['Cooking Oil', 'Soap'])
        self.assertEqual(response.data['payment_terms'], 'Net 30')
        self.assertEqual(response.data['status'], 'active')

    def test_supplier_requires_category(self):
        """Test at least one category is required"""
        response = self.client.post('/api/v1/suppliers/', self._payload(categories=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('categories', response.data)

    def test_supplier_invalid_email(self):
        """Test email must be valid"""
        response = self.client.post('/api/v1/suppliers/', self._payload(email='not-an-email'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_filter_and_update_supplier(self):
        """Test status filter, search and partial update"""
        TestDataFactory.create_supplier(name='Active One')
        inactive = TestDataFactory.create_supplier(name='Dormant', status='inactive')

        response = self.client.get('/api/v1/suppliers/?status=inactive')
        self.assertEqual([s['name'] for s in response.data], ['Dormant'])

        response = self.client.get('/api/v1/suppliers/?search=active')
        self.assertEqual([s['name'] for s in response.data], ['Active One'])

        response = self.client.patch(f'/api/v1/suppliers/{inactive.id}/', {'status': 'active'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Supplier.objects.get(pk=inactive.id).status, 'active')

    def test_delete_supplier(self):
        """Test deleting a supplier"""
        supplier = TestDataFactory.create_supplier()
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Supplier.objects.exists())
