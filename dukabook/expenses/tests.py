"""
Comprehensive test suite for Expenses module
Tests: Expense CRUD, Validation, Filters, Summary
"""
from datetime import date
from decimal import Decimal

from django.utils import timezone
from rest_framework import status
from dukabook.core.test_utils import TestDataFactory, APITestCase
from dukabook.expenses.models import Expense


class ExpenseAPITests(APITestCase):
    """Test expense endpoints"""

    def test_create_expense(self):
        """Test recording an expense"""
        response = self.client.post('/api/v1/expenses/', {
            'category': 'Rent',
            'amount': '15000.00',
            'expense_date': '2024-06-01',
            'vendor': 'Landlord',
            'is_recurring': True
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['payment_method'], 'Cash')
        self.assertEqual(Expense.objects.get().created_by, self.user)

    def test_non_positive_amount_rejected(self):
        """Test amount must be greater than zero"""
        response = self.client.post('/api/v1/expenses/', {
            'category': 'Rent', 'amount': '0', 'expense_date': '2024-06-01'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

    def test_unknown_category_rejected(self):
        """Test category must be one of the fixed choices"""
        response = self.client.post('/api/v1/expenses/', {
            'category': 'Holiday', 'amount': '10', 'expense_date': '2024-06-01'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('category', response.data)

    def test_list_ordered_by_expense_date(self):
        """Test newest expense date first"""
        TestDataFactory.create_expense(expense_date=date(2024, 1, 5), description='older')
        TestDataFactory.create_expense(expense_date=date(2024, 3, 5), description='newer')
        response = self.client.get('/api/v1/expenses/')
        self.assertEqual([e['description'] for e in response.data], ['newer', 'older'])

    def test_filters(self):
        """Test search, category, month and date range filters"""
        TestDataFactory.create_expense(category='Utilities', vendor='Kenya Power')
        TestDataFactory.create_expense(category='Rent', expense_date=date(2000, 1, 15))

        response = self.client.get('/api/v1/expenses/?search=power')
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/v1/expenses/?category=Rent')
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/v1/expenses/?month=current')
        self.assertEqual([e['category'] for e in response.data], ['Utilities'])

        response = self.client.get('/api/v1/expenses/?date_from=2000-01-01&date_to=2000-01-31')
        self.assertEqual([e['category'] for e in response.data], ['Rent'])

        response = self.client.get('/api/v1/expenses/?month=last')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete(self):
        """Test partial update and deletion"""
        expense = TestDataFactory.create_expense()
        response = self.client.patch(f'/api/v1/expenses/{expense.id}/', {'amount': '250.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['amount'], '250.00')

        response = self.client.delete(f'/api/v1/expenses/{expense.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Expense.objects.exists())

    def test_summary(self):
        """Test totals and category breakdown"""
        TestDataFactory.create_expense(amount=Decimal('100'), category='Utilities')
        TestDataFactory.create_expense(amount=Decimal('50'), category='Utilities')
        TestDataFactory.create_expense(amount=Decimal('400'), category='Rent', expense_date=date(2000, 1, 1))

        response = self.client.get('/api/v1/expenses/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], Decimal('550.00'))
        self.assertEqual(response.data['today'], Decimal('150.00'))
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['category_breakdown'][0]['category'], 'Rent')

    def test_this_month_total(self):
        """Test this month's total ignores older expenses"""
        TestDataFactory.create_expense(amount=Decimal('70'), expense_date=timezone.localdate())
        TestDataFactory.create_expense(amount=Decimal('30'), expense_date=date(2000, 1, 1))
        response = self.client.get('/api/v1/expenses/summary/')
        self.assertEqual(response.data['this_month'], Decimal('70.00'))
