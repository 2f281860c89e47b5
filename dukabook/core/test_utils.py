"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from dukabook.catalog.models import Category, Product
from dukabook.expenses.models import Expense
from dukabook.parties.models import Debtor, Supplier
from dukabook.parties.services import record_payment
from dukabook.sales.services import record_sale
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_category(name=None, description=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(name=name, description=description or f'Test category {name}')

    @staticmethod
    def create_product(name=None, category=None, sku=None, buying_price=Decimal('50.00'),
                       selling_price=Decimal('80.00'), quantity=10, low_stock_threshold=5, user=None):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        return Product.objects.create(
            name=name,
            category=category,
            sku=sku,
            buying_price=Decimal(buying_price),
            selling_price=Decimal(selling_price),
            quantity=quantity,
            low_stock_threshold=low_stock_threshold,
            created_by=user
        )

    @staticmethod
    def create_sale(product=None, quantity=1, user=None, payment_method='Cash', **kwargs):
        """Record a one-item sale through the sales service (updates stock)"""
        if product is None:
            product = TestDataFactory.create_product(quantity=max(quantity, 10))
        return record_sale(
            [{'product': product, 'quantity': quantity}],
            user=user,
            payment_method=payment_method,
            **kwargs
        )

    @staticmethod
    def create_debtor(name=None, phone='0712345678', credit_limit=Decimal('1000.00'),
                      outstanding_balance=Decimal('0.00'), due_date=None, **kwargs):
        """Create a test debtor"""
        if not name:
            name = f'Debtor_{TestDataFactory.random_string(6)}'
        return Debtor.objects.create(
            name=name,
            phone=phone,
            credit_limit=Decimal(credit_limit),
            outstanding_balance=Decimal(outstanding_balance),
            due_date=due_date,
            **kwargs
        )

    @staticmethod
    def create_payment(debtor, amount, payment_method='Cash', user=None):
        """Record a debtor payment through the parties service"""
        _, payment = record_payment(debtor.pk, Decimal(amount), payment_method=payment_method, user=user)
        return payment

    @staticmethod
    def create_supplier(name=None, categories=None, status='active'):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        return Supplier.objects.create(
            name=name,
            contact_person='Jane Wanjiku',
            email=f'{TestDataFactory.random_string(6).lower()}@supplier.test',
            phone='0722000000',
            address='Industrial Area',
            city='Nairobi',
            country='Kenya',
            postal_code='00100',
            categories=categories or ['Groceries'],
            status=status
        )

    @staticmethod
    def create_expense(amount=Decimal('100.00'), category='Utilities', expense_date=None, **kwargs):
        """Create a test expense (defaults to today)"""
        return Expense.objects.create(
            amount=Decimal(amount),
            category=category,
            expense_date=expense_date or timezone.localdate(),
            **kwargs
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()


class APITestCase(TestCase):
    """TestCase with an authenticated client and an empty cache"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
