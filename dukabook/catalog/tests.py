"""
Comprehensive test suite for Catalog module
Tests: Categories, Products, Stock Status, Product Summary, CSV Bulk Import
"""
import os
import tempfile
from decimal import Decimal
from io import StringIO

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status
from dukabook.catalog.bulk_import import (
    split_csv_line, parse_csv, parse_number, import_products, build_template_csv,
    ImportValidationError, TEMPLATE_HEADERS,
)
from dukabook.catalog.models import Category, Product
from dukabook.catalog.utils import get_stock_status, get_profit_and_margin, OUT_OF_STOCK, LOW_STOCK, IN_STOCK
from dukabook.core.test_utils import TestDataFactory, APITestCase

HEADER = 'name,category,costprice,sellingprice,quantity,sku'


class StockHelperTests(TestCase):
    """Test stock status and margin helpers"""

    def test_stock_status_boundaries(self):
        """Test zero, threshold and above-threshold quantities"""
        self.assertEqual(get_stock_status(0, 5), OUT_OF_STOCK)
        self.assertEqual(get_stock_status(-2, 5), OUT_OF_STOCK)
        self.assertEqual(get_stock_status(5, 5), LOW_STOCK)
        self.assertEqual(get_stock_status(1, 5), LOW_STOCK)
        self.assertEqual(get_stock_status(6, 5), IN_STOCK)

    def test_profit_and_margin(self):
        """Test margin is a share of the selling price"""
        profit, margin = get_profit_and_margin(Decimal('60'), Decimal('80'))
        self.assertEqual(profit, Decimal('20'))
        self.assertEqual(margin, Decimal('25.00'))

    def test_margin_when_selling_price_is_zero(self):
        """Test margin does not divide by zero"""
        profit, margin = get_profit_and_margin(Decimal('10'), Decimal('0'))
        self.assertEqual(profit, Decimal('-10'))
        self.assertEqual(margin, Decimal('0.00'))

    def test_stock_value_falls_back_to_selling_price(self):
        """Test stock value uses selling price when cost is missing"""
        product = TestDataFactory.create_product(buying_price=0, selling_price=Decimal('30'), quantity=4)
        self.assertEqual(product.stock_value, Decimal('120'))


class CSVParsingTests(TestCase):
    """Test the CSV tokenizer and row validation"""

    def test_split_quoted_values(self):
        """Test commas inside quotes and doubled quotes"""
        self.assertEqual(
            split_csv_line('"Milk, 500ml",Dairy," say ""hi"" ",3'),
            ['Milk, 500ml', 'Dairy', 'say "hi"', '3']
        )

    def test_split_trailing_empty_value(self):
        """Test a trailing comma yields an empty value"""
        self.assertEqual(split_csv_line('a,b,'), ['a', 'b', ''])

    def test_parse_number(self):
        """Test numbers, blanks and garbage"""
        self.assertEqual(parse_number(' 12.5 '), Decimal('12.5'))
        self.assertIsNone(parse_number(''))
        self.assertIsNone(parse_number('abc'))
        self.assertIsNone(parse_number('NaN'))

    def test_empty_file(self):
        """Test an empty file is reported"""
        self.assertEqual(parse_csv('  \n\n')['errors'], ['File is empty'])

    def test_missing_required_header(self):
        """Test each missing required header is reported"""
        parsed = parse_csv('name,category,costprice\nSoap,Hygiene,10\n')
        self.assertIn('Missing required header: sellingprice', parsed['errors'])
        self.assertIn('Missing required header: quantity', parsed['errors'])

    def test_row_errors_carry_line_numbers(self):
        """Test row errors reference the file line"""
        text = f"{HEADER}\nSoap,Hygiene,10,15,3,\n,Hygiene,abc,15,2.5,\n"
        parsed = parse_csv(text)
        self.assertEqual(len(parsed['rows']), 2)
        self.assertIn('Line 3: name is required', parsed['errors'])
        self.assertIn('Line 3: costprice must be a number', parsed['errors'])
        self.assertIn('Line 3: quantity must be a whole number', parsed['errors'])
        self.assertFalse(any(e.startswith('Line 2') for e in parsed['errors']))

    def test_numbers_must_fit_product_columns(self):
        """Test negative and oversized numbers are row errors"""
        text = f"{HEADER}\nMilk,Dairy,1e30,-2,3,\nBread,Bakery,40,55,-1,\nCake,Bakery,40,55,99999999999,\n"
        parsed = parse_csv(text)
        self.assertIn('Line 2: costprice is too large', parsed['errors'])
        self.assertIn('Line 2: sellingprice cannot be negative', parsed['errors'])
        self.assertIn('Line 3: quantity cannot be negative', parsed['errors'])
        self.assertIn('Line 4: quantity is too large', parsed['errors'])

    def test_largest_price_is_accepted(self):
        """Test a price at the column limit parses cleanly"""
        parsed = parse_csv(f"{HEADER}\nSafe,Hardware,9999999999.99,9999999999.99,1,\n")
        self.assertEqual(parsed['errors'], [])

    def test_split_uneven_whitespace(self):
        """Test values around quoted cells are trimmed"""
        self.assertEqual(split_csv_line(' Soap ,"Hygiene" , 3 '), ['Soap', 'Hygiene', '3'])

    def test_headers_are_case_insensitive(self):
        """Test headers are lower-cased and rows keyed by them"""
        parsed = parse_csv('Name,Category,CostPrice,SellingPrice,Quantity\r\nSoap,Hygiene,10,15,3\r\n')
        self.assertEqual(parsed['errors'], [])
        self.assertEqual(parsed['rows'][0]['costprice'], '10')

    def test_template_parses_cleanly(self):
        """Test the downloadable template is itself importable"""
        parsed = parse_csv(build_template_csv())
        self.assertEqual(parsed['headers'], TEMPLATE_HEADERS)
        self.assertEqual(parsed['errors'], [])
        self.assertEqual(len(parsed['rows']), 1)


class ImportProductsTests(TestCase):
    """Test writing parsed rows"""

    def test_import_creates_products_and_categories(self):
        """Test rows become products in resolved categories"""
        Category.objects.create(name='Dairy')
        text = f"{HEADER}\nMilk,dairy,50,60,10,\nBread,Bakery,40,55,8,BRD-1\nCake,Bakery,100,150,2,\n"
        created = import_products(parse_csv(text), chunk_size=2)
        self.assertEqual(len(created), 3)
        self.assertEqual(Category.objects.count(), 2)
        milk = Product.objects.get(name='Milk')
        self.assertEqual(milk.category.name, 'Dairy')
        self.assertTrue(milk.sku.startswith('SKU-'))
        self.assertEqual(milk.low_stock_threshold, 5)
        self.assertEqual(Product.objects.get(sku='BRD-1').quantity, 8)

    def test_import_refuses_file_with_errors(self):
        """Test nothing is written when a row is invalid"""
        text = f"{HEADER}\nMilk,Dairy,50,60,10,\nBread,,40,55,8,\n"
        with self.assertRaises(ImportValidationError) as ctx:
            import_products(parse_csv(text))
        self.assertIn('Line 3: category is required', ctx.exception.errors)
        self.assertEqual(Product.objects.count(), 0)

    def test_import_refuses_oversized_price(self):
        """Test an oversized price is refused before anything is written"""
        text = f"{HEADER}\nMilk,Dairy,1e30,2,3,\n"
        with self.assertRaises(ImportValidationError) as ctx:
            import_products(parse_csv(text))
        self.assertEqual(ctx.exception.errors, ['Line 2: costprice is too large'])
        self.assertEqual(Product.objects.count(), 0)

    def test_import_refuses_header_only_file(self):
        """Test a file with no data rows"""
        with self.assertRaises(ImportValidationError) as ctx:
            import_products(parse_csv(f"{HEADER}\n"))
        self.assertEqual(ctx.exception.errors, ['No rows found to import'])

    def test_import_refuses_existing_and_duplicate_skus(self):
        """Test SKU clashes are reported before anything is written"""
        TestDataFactory.create_product(sku='TAKEN')
        text = f"{HEADER}\nA,X,1,2,1,TAKEN\nB,X,1,2,1,DUP\nC,X,1,2,1,DUP\n"
        with self.assertRaises(ImportValidationError) as ctx:
            import_products(parse_csv(text))
        self.assertIn('Line 2: sku TAKEN already exists', ctx.exception.errors)
        self.assertIn('Line 4: sku DUP duplicates line 3', ctx.exception.errors)
        self.assertEqual(Product.objects.count(), 1)
        self.assertFalse(Category.objects.filter(name='X').exists())


class CategoryAPITests(APITestCase):
    """Test category endpoints"""

    def test_create_and_list_categories(self):
        """Test creating a category and listing with product counts"""
        response = self.client.post('/api/v1/categories/', {'name': 'Beverages'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        TestDataFactory.create_product(category=Category.objects.get(name='Beverages'))

        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['product_count'], 1)

    def test_categories_listed_by_name(self):
        """Test the category list is alphabetical"""
        TestDataFactory.create_category(name='Zebra Crossing')
        TestDataFactory.create_category(name='Apples')
        TestDataFactory.create_category(name='Maize Flour')
        response = self.client.get('/api/v1/categories/')
        self.assertEqual([c['name'] for c in response.data], ['Apples', 'Maize Flour', 'Zebra Crossing'])
        self.assertEqual(response.data[0]['description'], 'Test category Apples')

    def test_duplicate_category_name_rejected(self):
        """Test category names are unique regardless of case"""
        TestDataFactory.create_category(name='Beverages')
        response = self.client.post('/api/v1/categories/', {'name': 'beverages'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_category_keeps_products(self):
        """Test products survive their category"""
        category = TestDataFactory.create_category()
        product = TestDataFactory.create_product(category=category)
        response = self.client.delete(f'/api/v1/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        product.refresh_from_db()
        self.assertIsNone(product.category)


class ProductAPITests(APITestCase):
    """Test product endpoints"""

    def test_create_product_with_category_name(self):
        """Test a category name is resolved or created"""
        response = self.client.post('/api/v1/products/', {
            'name': 'Sugar 1kg',
            'category_name': 'Groceries',
            'buying_price': '120.00',
            'selling_price': '150.00',
            'quantity': 3,
            'sku': ' SUG-1 '
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['category_name'], 'Groceries')
        self.assertEqual(response.data['sku'], 'SUG-1')
        self.assertEqual(response.data['stock_status'], LOW_STOCK)
        self.assertEqual(response.data['margin'], '20.00')

    def test_duplicate_sku_rejected(self):
        """Test SKU uniqueness"""
        TestDataFactory.create_product(sku='SUG-1')
        response = self.client.post('/api/v1/products/', {
            'name': 'Sugar', 'buying_price': '1', 'selling_price': '2', 'quantity': 1, 'sku': 'SUG-1'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

    def test_negative_price_rejected(self):
        """Test negative prices are refused"""
        response = self.client.post('/api/v1/products/', {
            'name': 'Sugar', 'buying_price': '-1', 'selling_price': '2', 'quantity': 1
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('buying_price', response.data)

    def test_filter_products(self):
        """Test search and stock status filters"""
        TestDataFactory.create_product(name='Omo Detergent', quantity=0)
        TestDataFactory.create_product(name='Milk', quantity=3)
        TestDataFactory.create_product(name='Bread', quantity=50)

        response = self.client.get('/api/v1/products/?search=omo')
        self.assertEqual([p['name'] for p in response.data], ['Omo Detergent'])

        response = self.client.get(f'/api/v1/products/?stock_status={LOW_STOCK}')
        self.assertEqual([p['name'] for p in response.data], ['Milk'])

        response = self.client.get(f'/api/v1/products/?stock_status={IN_STOCK}')
        self.assertEqual([p['name'] for p in response.data], ['Bread'])

        response = self.client.get(f'/api/v1/products/?stock_status={OUT_OF_STOCK}')
        self.assertEqual([p['name'] for p in response.data], ['Omo Detergent'])

        response = self.client.get('/api/v1/products/?stock_status=bogus')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete_product(self):
        """Test partial update and deletion"""
        product = TestDataFactory.create_product(name='Milk')
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'selling_price': '99.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['selling_price'], '99.00')

        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())

    def test_product_not_found(self):
        """Test unknown product id"""
        response = self.client.get('/api/v1/products/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_product_summary(self):
        """Test headline numbers"""
        TestDataFactory.create_product(selling_price=Decimal('10'), quantity=0)
        TestDataFactory.create_product(selling_price=Decimal('10'), quantity=2)
        TestDataFactory.create_product(selling_price=Decimal('10'), quantity=20)
        response = self.client.get('/api/v1/products/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_products'], 3)
        self.assertEqual(response.data['low_stock_count'], 1)
        self.assertEqual(response.data['out_of_stock_count'], 1)
        self.assertEqual(Decimal(str(response.data['total_stock_value'])), Decimal('220'))
        self.assertEqual(len(response.data['recent_products']), 3)


class BulkImportAPITests(APITestCase):
    """Test CSV template download and bulk import endpoint"""

    def test_download_template(self):
        """Test the template is served as a CSV attachment"""
        response = self.client.get('/api/v1/products/import-template/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('text/csv', response['Content-Type'])
        self.assertIn('products_template.csv', response['Content-Disposition'])
        self.assertTrue(response.content.decode().startswith('name,category,costprice'))

    def test_dry_run_writes_nothing(self):
        """Test a dry run returns parsed rows only"""
        text = f"{HEADER}\nMilk,Dairy,50,60,10,\n"
        response = self.client.post('/api/v1/products/bulk-import/?dry_run=true', {'csv': text}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['row_count'], 1)
        self.assertEqual(response.data['errors'], [])
        self.assertEqual(Product.objects.count(), 0)

    def test_dry_run_reports_oversized_price(self):
        """Test a dry run lists range errors instead of failing"""
        text = f"{HEADER}\nMilk,Dairy,1e30,60,10,\n"
        response = self.client.post('/api/v1/products/bulk-import/?dry_run=true', {'csv': text}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['errors'], ['Line 2: costprice is too large'])
        self.assertEqual(response.data['rows'], [])

    def test_upload_file(self):
        """Test importing an uploaded file"""
        upload = SimpleUploadedFile(
            'products.csv',
            f"{HEADER}\nMilk,Dairy,50,60,10,\nBread,Bakery,40,55,8,\n".encode('utf-8'),
            content_type='text/csv'
        )
        response = self.client.post('/api/v1/products/bulk-import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['imported'], 2)
        self.assertEqual(Product.objects.filter(created_by=self.user).count(), 2)

    def test_invalid_file_returns_errors(self):
        """Test a bad file is refused with every error listed"""
        response = self.client.post('/api/v1/products/bulk-import/', {'csv': 'name\nMilk\n'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Missing required header: category', response.data['errors'])
        self.assertEqual(Product.objects.count(), 0)


class ImportProductsCommandTests(TestCase):
    """Test the import_products management command"""

    def setUp(self):
        handle, self.path = tempfile.mkstemp(suffix='.csv')
        os.close(handle)

    def tearDown(self):
        os.remove(self.path)

    def _write(self, text):
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(text)

    def test_command_imports_rows(self):
        """Test a clean file is imported"""
        self._write(f"{HEADER}\nMilk,Dairy,50,60,10,\n")
        out = StringIO()
        call_command('import_products', csv_file=self.path, stdout=out)
        self.assertEqual(Product.objects.count(), 1)
        self.assertIn('Products Created: 1', out.getvalue())

    def test_command_dry_run(self):
        """Test --dry-run writes nothing"""
        self._write(f"{HEADER}\nMilk,Dairy,50,60,10,\n")
        call_command('import_products', csv_file=self.path, dry_run=True, stdout=StringIO())
        self.assertEqual(Product.objects.count(), 0)

    def test_command_fails_on_errors(self):
        """Test an invalid file raises CommandError"""
        self._write(f"{HEADER}\nMilk,,50,60,10,\n")
        with self.assertRaises(CommandError):
            call_command('import_products', csv_file=self.path, stdout=StringIO())
        self.assertEqual(Product.objects.count(), 0)

    def test_command_unknown_user(self):
        """Test --username must exist"""
        self._write(f"{HEADER}\nMilk,Dairy,50,60,10,\n")
        with self.assertRaises(CommandError):
            call_command('import_products', csv_file=self.path, username='nobody', stdout=StringIO())
