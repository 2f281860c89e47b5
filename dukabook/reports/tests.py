"""
Comprehensive test suite for Reports module
Tests: Period Windows, Percentage Change, Period Summary, Dashboard, CSV Export
"""
from datetime import date, datetime, timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from dukabook.core.test_utils import TestDataFactory, APITestCase
from dukabook.reports.periods import get_period, pct_change, days_between
from dukabook.reports.services import build_period_summary
from dukabook.sales.models import Sale


def local(*args):
    return timezone.make_aware(datetime(*args))


class PeriodTests(TestCase):
    """Test preset windows and percentage change"""

    def test_weekly_window(self):
        """Test weekly covers today and the six days before"""
        period = get_period('weekly', date(2024, 6, 15))
        self.assertEqual(period['start'], local(2024, 6, 9))
        self.assertEqual(period['prev_start'], local(2024, 6, 2))
        self.assertEqual(period['prev_end'], period['start'])
        self.assertEqual(timezone.localtime(period['end']).date(), date(2024, 6, 15))

    def test_today_window(self):
        """Test today compares against yesterday"""
        period = get_period('today', date(2024, 6, 15))
        self.assertEqual(period['start'], local(2024, 6, 15))
        self.assertEqual(period['prev_start'], local(2024, 6, 14))

    def test_monthly_window_in_january(self):
        """Test the previous month crosses the year boundary"""
        period = get_period('monthly', date(2024, 1, 10))
        self.assertEqual(period['start'], local(2024, 1, 1))
        self.assertEqual(period['prev_start'], local(2023, 12, 1))

    def test_yearly_window(self):
        """Test yearly starts on January 1st"""
        period = get_period('yearly', date(2024, 6, 15))
        self.assertEqual(period['start'], local(2024, 1, 1))
        self.assertEqual(period['prev_start'], local(2023, 1, 1))

    def test_unknown_preset(self):
        """Test unknown presets raise ValueError"""
        with self.assertRaises(ValueError):
            get_period('fortnightly')

    def test_pct_change(self):
        """Test growth from zero and ordinary changes"""
        self.assertEqual(pct_change(0, 0), 0.0)
        self.assertEqual(pct_change(5, 0), 100.0)
        self.assertEqual(pct_change(150, 100), 50.0)
        self.assertEqual(pct_change(Decimal('50'), Decimal('100')), -50.0)

    def test_days_between(self):
        """Test every day of the window is listed"""
        period = get_period('weekly', date(2024, 6, 15))
        days = days_between(period['start'], period['end'])
        self.assertEqual(len(days), 7)
        self.assertEqual(days[0], date(2024, 6, 9))
        self.assertEqual(days[-1], date(2024, 6, 15))


class PeriodSummaryTests(TestCase):
    """Test current vs previous period figures"""

    def setUp(self):
        cache.clear()
        self.today = date(2024, 6, 15)
        self.product = TestDataFactory.create_product(name='Rice', selling_price=Decimal('100.00'), quantity=20)
        TestDataFactory.create_product(name='Zed Soap', quantity=6)

        self._sale(1, 'Cash', local(2024, 6, 14, 10))
        self._sale(3, 'M-Pesa', local(2024, 6, 10, 9))
        self._sale(2, 'Cash', local(2024, 6, 5, 12))
        TestDataFactory.create_expense(amount=Decimal('50'), expense_date=date(2024, 6, 12))
        TestDataFactory.create_expense(amount=Decimal('20'), expense_date=date(2024, 6, 3))

    def _sale(self, quantity, payment_method, created_at):
        sale = TestDataFactory.create_sale(product=self.product, quantity=quantity, payment_method=payment_method)
        Sale.objects.filter(pk=sale.pk).update(created_at=created_at)

    def test_weekly_totals(self):
        """Test sales, expenses, profit and transactions"""
        summary = build_period_summary('weekly', self.today)
        self.assertEqual(summary['sales']['current'], Decimal('400.00'))
        self.assertEqual(summary['sales']['previous'], Decimal('200.00'))
        self.assertEqual(summary['sales']['change_pct'], 100.0)
        self.assertEqual(summary['expenses']['current'], Decimal('50.00'))
        self.assertEqual(summary['expenses']['previous'], Decimal('20.00'))
        self.assertEqual(summary['profit']['current'], Decimal('350.00'))
        self.assertEqual(summary['profit']['change_pct'], 94.44)
        self.assertEqual(summary['transactions']['current'], 2)
        self.assertEqual(summary['transactions']['previous'], 1)

    def test_derived_figures(self):
        """Test average sale value, cash share and top stock share"""
        summary = build_period_summary('weekly', self.today)
        self.assertEqual(summary['average_sale_value'], Decimal('200.00'))
        self.assertEqual(summary['cash_share_pct'], 50.0)
        self.assertEqual(summary['inventory_top_product'], 'Rice')
        # Rice has 14 left out of 20 units in stock
        self.assertEqual(summary['inventory_top_share_pct'], 70.0)

    def test_daily_series(self):
        """Test one entry per day with sales and expenses"""
        daily = {row['date']: row for row in build_period_summary('weekly', self.today)['daily']}
        self.assertEqual(len(daily), 7)
        self.assertEqual(daily[date(2024, 6, 14)]['sales'], Decimal('100.00'))
        self.assertEqual(daily[date(2024, 6, 10)]['sales'], Decimal('300.00'))
        self.assertEqual(daily[date(2024, 6, 12)]['expenses'], Decimal('50.00'))
        self.assertEqual(daily[date(2024, 6, 11)]['sales'], Decimal('0.00'))

    def test_empty_period(self):
        """Test a period with no sales"""
        summary = build_period_summary('today', date(2030, 1, 1))
        self.assertEqual(summary['sales']['current'], Decimal('0.00'))
        self.assertEqual(summary['sales']['change_pct'], 0.0)
        self.assertEqual(summary['average_sale_value'], Decimal('0.00'))
        self.assertEqual(summary['cash_share_pct'], 0.0)


class ReportsAPITests(APITestCase):
    """Test report endpoints"""

    def setUp(self):
        super().setUp()
        self.product = TestDataFactory.create_product(
            name='Tea Leaves', selling_price=Decimal('80.00'), quantity=10, low_stock_threshold=5
        )

    def test_dashboard(self):
        """Test today's figures, top products and low stock"""
        TestDataFactory.create_sale(product=self.product, quantity=6)
        TestDataFactory.create_expense(amount=Decimal('100'))
        TestDataFactory.create_expense(amount=Decimal('40'), expense_date=timezone.localdate() - timedelta(days=3))

        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data
        self.assertEqual(data['today_sales_total'], Decimal('480.00'))
        self.assertEqual(data['today_sales_count'], 1)
        self.assertEqual(data['today_expenses_total'], Decimal('100.00'))
        self.assertEqual(data['today_profit'], Decimal('380.00'))
        self.assertEqual(data['week_expenses_total'], Decimal('140.00'))
        self.assertEqual(data['week_net_balance'], Decimal('340.00'))
        self.assertEqual(data['top_products'], [{'name': 'Tea Leaves', 'quantity': 6}])
        self.assertEqual([p['name'] for p in data['low_stock_products']], ['Tea Leaves'])
        self.assertEqual(data['total_products'], 1)

    def test_dashboard_refreshes_after_sale(self):
        """Test a new sale invalidates the cached dashboard"""
        first = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(first.data['today_sales_count'], 0)
        TestDataFactory.create_sale(product=self.product, quantity=1)
        second = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(second.data['today_sales_count'], 1)

    def test_summary_default_preset(self):
        """Test the summary defaults to weekly"""
        TestDataFactory.create_sale(product=self.product, quantity=1)
        response = self.client.get('/api/v1/reports/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['preset'], 'weekly')
        self.assertEqual(response.data['transactions']['current'], 1)
        self.assertEqual(len(response.data['daily']), 7)

    def test_summary_invalid_preset(self):
        """Test unknown presets are rejected"""
        response = self.client.get('/api/v1/reports/summary/?preset=decade')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_export_csv(self):
        """Test the period's sales download as CSV"""
        sale = TestDataFactory.create_sale(product=self.product, quantity=2, customer_name='Njeri')
        response = self.client.get('/api/v1/reports/export/?preset=monthly')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('text/csv', response['Content-Type'])
        lines = response.content.decode().strip().splitlines()
        self.assertTrue(lines[0].startswith('sale_number,created_at'))
        self.assertEqual(len(lines), 2)
        self.assertIn(sale.sale_number, lines[1])
        self.assertIn('Njeri', lines[1])

    def test_export_invalid_preset(self):
        """Test export rejects unknown presets"""
        response = self.client.get('/api/v1/reports/export/?preset=nope')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reports_require_authentication(self):
        """Test reports are protected"""
        self.client.logout()
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
