"""
Comprehensive test suite for Inventory module
Tests: Stock Adjustments, Initialization, Overview, Stock Levels, Movements
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from dukabook.catalog.utils import LOW_STOCK, OUT_OF_STOCK
from dukabook.core.test_utils import TestDataFactory, APITestCase
from dukabook.inventory.models import InventoryTransaction
from dukabook.inventory.services import (
    adjust_stock, initialize_inventory, get_inventory_overview,
    InsufficientStockError, InventoryInitializationError,
)


class StockServiceTests(TestCase):
    """Test stock movement services"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(name='Maize Flour', quantity=10)

    def test_stock_in(self):
        """Test stock in increases quantity and writes a positive adjustment"""
        product, movement = adjust_stock(self.product.pk, 'in', 5, 'restock', user=self.user)
        self.assertEqual(product.quantity, 15)
        self.assertEqual(movement.transaction_type, 'adjustment')
        self.assertEqual(movement.quantity, 5)
        self.assertEqual(movement.stock_delta, 5)
        self.assertEqual(movement.notes, 'Restock')

    def test_stock_out_with_notes(self):
        """Test stock out is stored as a negative adjustment"""
        product, movement = adjust_stock(self.product.pk, 'out', 4, 'damaged', notes='Torn bags')
        self.assertEqual(product.quantity, 6)
        self.assertEqual(movement.quantity, -4)
        self.assertEqual(movement.notes, 'Damaged: Torn bags')

    def test_stock_out_beyond_quantity(self):
        """Test stock cannot go below zero"""
        with self.assertRaises(InsufficientStockError):
            adjust_stock(self.product.pk, 'out', 11, 'theft')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 10)
        self.assertEqual(InventoryTransaction.objects.count(), 0)

    def test_initialize_inventory(self):
        """Test one purchase movement per product with stock"""
        TestDataFactory.create_product(quantity=0)
        TestDataFactory.create_product(quantity=3)
        movements = initialize_inventory(user=self.user)
        self.assertEqual(len(movements), 2)
        self.assertTrue(all(m.transaction_type == 'purchase' for m in movements))
        self.assertEqual(
            InventoryTransaction.objects.get(product=self.product).quantity, 10
        )

    def test_initialize_twice_refused(self):
        """Test initialization is refused once movements exist"""
        initialize_inventory()
        with self.assertRaises(InventoryInitializationError):
            initialize_inventory()

    def test_initialize_without_stock_refused(self):
        """Test initialization needs at least one product with stock"""
        self.product.quantity = 0
        self.product.save()
        with self.assertRaises(InventoryInitializationError):
            initialize_inventory()

    def test_overview_counts_and_value(self):
        """Test stock counts and value at cost"""
        TestDataFactory.create_product(buying_price=Decimal('0'), selling_price=Decimal('20'), quantity=2)
        TestDataFactory.create_product(buying_price=Decimal('5'), quantity=0)
        overview = get_inventory_overview()
        self.assertEqual(overview['total_products'], 3)
        self.assertEqual(overview['out_of_stock'], 1)
        self.assertEqual(overview['low_stock'], 1)
        self.assertEqual(overview['in_stock'], 1)
        # 10 x 50 at cost plus 2 x 20 at selling price
        self.assertEqual(overview['inventory_value'], Decimal('540'))
        self.assertFalse(overview['has_movements'])


class InventoryAPITests(APITestCase):
    """Test inventory endpoints"""

    def setUp(self):
        super().setUp()
        self.product = TestDataFactory.create_product(name='Cooking Oil', quantity=8, low_stock_threshold=5)

    def test_stock_adjustment_endpoint(self):
        """Test creating a stock adjustment"""
        response = self.client.post('/api/v1/inventory/adjustments/', {
            'product': self.product.id,
            'adjustment_type': 'out',
            'quantity': 3,
            'reason': 'expired'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity'], 5)
        self.assertEqual(response.data['transaction']['quantity'], -3)

    def test_stock_adjustment_insufficient_stock(self):
        """Test stock out beyond quantity is refused"""
        response = self.client.post('/api/v1/inventory/adjustments/', {
            'product': self.product.id,
            'adjustment_type': 'out',
            'quantity': 9,
            'reason': 'theft'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock', response.data['error'])

    def test_stock_adjustment_validation(self):
        """Test zero quantity and unknown reasons are rejected"""
        response = self.client.post('/api/v1/inventory/adjustments/', {
            'product': self.product.id,
            'adjustment_type': 'in',
            'quantity': 0,
            'reason': 'gift'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)
        self.assertIn('reason', response.data)

    def test_initialize_endpoint(self):
        """Test initializing and re-initializing inventory"""
        response = self.client.post('/api/v1/inventory/initialize/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 1)

        response = self.client.post('/api/v1/inventory/initialize/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Inventory already has stock movements.')

    def test_overview_endpoint(self):
        """Test inventory overview"""
        adjust_stock(self.product.pk, 'in', 1, 'found')
        response = self.client.get('/api/v1/inventory/overview/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['has_movements'])
        self.assertEqual(response.data['recent_movements'][0]['product_name'], 'Cooking Oil')

    def test_stock_levels_filter(self):
        """Test stock levels filtered by status"""
        TestDataFactory.create_product(name='Salt', quantity=0)
        adjust_stock(self.product.pk, 'out', 4, 'correction')
        response = self.client.get(f'/api/v1/inventory/stock-levels/?stock_status={LOW_STOCK}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([level['name'] for level in response.data], ['Cooking Oil'])

        response = self.client.get(f'/api/v1/inventory/stock-levels/?stock_status={OUT_OF_STOCK}')
        self.assertEqual([level['name'] for level in response.data], ['Salt'])

    def test_transaction_list(self):
        """Test movement listing with filters and limit"""
        adjust_stock(self.product.pk, 'in', 1, 'restock')
        adjust_stock(self.product.pk, 'in', 2, 'restock')
        TestDataFactory.create_sale(product=self.product, quantity=1)

        response = self.client.get('/api/v1/inventory/transactions/?type=adjustment')
        self.assertEqual(len(response.data), 2)

        response = self.client.get(f'/api/v1/inventory/transactions/?product={self.product.id}&limit=1')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['transaction_type'], 'sale')

        response = self.client.get('/api/v1/inventory/transactions/?limit=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_transaction_list_rejects_bad_filters(self):
        """Test a non-numeric product or unknown type is a 400, not a crash"""
        response = self.client.get('/api/v1/inventory/transactions/?product=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('product', response.data)

        response = self.client.get('/api/v1/inventory/transactions/?type=theft')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('type', response.data)
