"""
Comprehensive test suite for Sales module
Tests: Sale Numbers, Totals, Recording, Deletion/Restock, Filters, Summary
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from dukabook.catalog.models import Product
from dukabook.core.test_utils import TestDataFactory, APITestCase
from dukabook.inventory.models import InventoryTransaction
from dukabook.inventory.services import InsufficientStockError
from dukabook.sales.models import Sale, SaleItem
from dukabook.sales.services import (
    generate_sale_number, calculate_totals, record_sale, delete_sale, item_preview, get_sales_summary,
    InvalidSaleError,
)


class SaleServiceTests(TestCase):
    """Test the sale recording service"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.bread = TestDataFactory.create_product(name='Bread', selling_price=Decimal('55.00'), buying_price=Decimal('40.00'), quantity=10)
        self.milk = TestDataFactory.create_product(name='Milk', selling_price=Decimal('60.00'), buying_price=Decimal('50.00'), quantity=5)

    def test_sale_number_format(self):
        """Test SALE-YYYYMMDDHHMMSS-NNN"""
        self.assertRegex(generate_sale_number(), r'^SALE-\d{14}-\d{3}$')

    def test_calculate_totals(self):
        """Test subtotal, tax and discount"""
        subtotal, tax, total = calculate_totals([(2, Decimal('55.00')), (1, Decimal('60.00'))], Decimal('16'), Decimal('10'))
        self.assertEqual(subtotal, Decimal('170.00'))
        self.assertEqual(tax, Decimal('27.20'))
        self.assertEqual(total, Decimal('187.20'))

    def test_record_sale_updates_stock_and_movements(self):
        """Test a sale reduces stock and writes sale movements"""
        sale = record_sale([
            {'product': self.bread, 'quantity': 2},
            {'product': self.milk, 'quantity': 1, 'unit_price': Decimal('58.00')},
        ], user=self.user, payment_method='M-Pesa')

        self.assertEqual(sale.subtotal, Decimal('168.00'))
        self.assertEqual(sale.total, Decimal('168.00'))
        self.assertEqual(sale.items.count(), 2)
        self.bread.refresh_from_db()
        self.milk.refresh_from_db()
        self.assertEqual(self.bread.quantity, 8)
        self.assertEqual(self.milk.quantity, 4)

        movements = InventoryTransaction.objects.filter(transaction_type='sale', reference_id=str(sale.id))
        self.assertEqual(movements.count(), 2)
        self.assertEqual(movements.first().notes, f"Sale {sale.sale_number}")

    def test_insufficient_stock_rolls_back(self):
        """Test nothing is written when any item lacks stock"""
        with self.assertRaises(InsufficientStockError):
            record_sale([
                {'product': self.bread, 'quantity': 2},
                {'product': self.milk, 'quantity': 6},
            ])
        self.bread.refresh_from_db()
        self.assertEqual(self.bread.quantity, 10)
        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(InventoryTransaction.objects.count(), 0)

    def test_discount_above_total_refused(self):
        """Test a sale cannot have a negative total"""
        with self.assertRaises(InvalidSaleError):
            record_sale([{'product': self.bread, 'quantity': 1}], discount_amount=Decimal('100'))
        self.assertEqual(Sale.objects.count(), 0)

    def test_delete_sale_restocks(self):
        """Test deleting a sale returns its items to stock"""
        sale = record_sale([{'product': self.bread, 'quantity': 3}])
        delete_sale(sale)
        self.bread.refresh_from_db()
        self.assertEqual(self.bread.quantity, 10)
        self.assertFalse(Sale.objects.exists())
        self.assertFalse(SaleItem.objects.exists())
        returned = InventoryTransaction.objects.get(transaction_type='return')
        self.assertEqual(returned.quantity, 3)
        self.assertIn('deleted', returned.notes)

    def test_delete_sale_with_removed_product(self):
        """Test items whose product is gone are skipped on restock"""
        sale = record_sale([{'product': self.bread, 'quantity': 1}, {'product': self.milk, 'quantity': 1}])
        Product.objects.filter(pk=self.bread.pk).delete()
        delete_sale(sale)
        self.milk.refresh_from_db()
        self.assertEqual(self.milk.quantity, 5)

    def test_item_preview(self):
        """Test the one-line item description"""
        sale = record_sale([{'product': self.bread, 'quantity': 2}, {'product': self.milk, 'quantity': 1}])
        self.assertEqual(item_preview(sale), 'Bread x 2 +1 more')

    def test_sales_summary(self):
        """Test today's revenue, count and profit"""
        record_sale([{'product': self.bread, 'quantity': 2}])
        record_sale([{'product': self.milk, 'quantity': 1}])
        summary = get_sales_summary()
        self.assertEqual(summary['today_count'], 2)
        self.assertEqual(summary['today_revenue'], Decimal('170.00'))
        self.assertEqual(summary['month_count'], 2)
        self.assertEqual(summary['today_profit'], Decimal('40.00'))
        self.assertEqual(summary['latest_sale_preview'], 'Milk x 1')


class SaleAPITests(APITestCase):
    """Test sale endpoints"""

    def setUp(self):
        super().setUp()
        self.product = TestDataFactory.create_product(name='Sugar', selling_price=Decimal('150.00'), quantity=10)

    def test_create_sale(self):
        """Test recording a sale through the API"""
        response = self.client.post('/api/v1/sales/', {
            'customer_name': 'Wanjiru',
            'payment_method': 'M-Pesa',
            'tax_rate': '16.00',
            'items': [{'product': self.product.id, 'quantity': 2}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['subtotal'], '300.00')
        self.assertEqual(response.data['tax_amount'], '48.00')
        self.assertEqual(response.data['total'], '348.00')
        self.assertEqual(response.data['item_count'], 1)
        self.assertEqual(response.data['items'][0]['product_name'], 'Sugar')
        self.assertEqual(Sale.objects.get().created_by, self.user)

    def test_create_sale_without_items(self):
        """Test a sale needs items"""
        response = self.client.post('/api/v1/sales/', {'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_create_sale_insufficient_stock(self):
        """Test overselling is refused"""
        response = self.client.post('/api/v1/sales/', {
            'items': [{'product': self.product.id, 'quantity': 11}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock for Sugar', response.data['error'])

    def test_create_sale_unknown_payment_method(self):
        """Test payment method must be a known choice"""
        response = self.client.post('/api/v1/sales/', {
            'payment_method': 'Barter',
            'items': [{'product': self.product.id, 'quantity': 1}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_and_filter_sales(self):
        """Test listing with search and payment method filters"""
        TestDataFactory.create_sale(product=self.product, customer_name='Otieno', payment_method='Cash')
        TestDataFactory.create_sale(product=self.product, customer_name='Akinyi', payment_method='M-Pesa')

        response = self.client.get('/api/v1/sales/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        self.assertEqual(response.data[0]['customer_name'], 'Akinyi')
        self.assertEqual(response.data[0]['item_count'], 1)

        response = self.client.get('/api/v1/sales/?search=otie')
        self.assertEqual([s['customer_name'] for s in response.data], ['Otieno'])

        response = self.client.get('/api/v1/sales/?payment_method=m-pesa')
        self.assertEqual([s['customer_name'] for s in response.data], ['Akinyi'])

        response = self.client.get('/api/v1/sales/?date_from=not-a-date')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_sale_endpoint(self):
        """Test deleting a sale restocks"""
        sale = TestDataFactory.create_sale(product=self.product, quantity=4)
        response = self.client.delete(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 10)

    def test_sale_detail(self):
        """Test retrieving one sale"""
        sale = TestDataFactory.create_sale(product=self.product)
        response = self.client.get(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sale_number'], sale.sale_number)

    def test_sale_summary_endpoint(self):
        """Test the sales summary"""
        TestDataFactory.create_sale(product=self.product, quantity=1)
        response = self.client.get('/api/v1/sales/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['today_count'], 1)
        self.assertIsNotNone(response.data['latest_sale'])
