"""
Comprehensive test suite for Core module
Tests: Authentication, Current User, Audit Logs, Report Cache Versioning
"""
from django.conf import settings
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from dukabook.core.cache_utils import cached_query, get_cache_version, bump_cache_version, REPORTS_NAMESPACE
from dukabook.core.models import AuditLog
from dukabook.core.test_utils import TestDataFactory, AuthenticatedAPIClient, APITestCase
from dukabook.core.utils import create_audit_log


class AuthenticationTests(TestCase):
    """Test JWT login, refresh and the current user endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='shopowner', password='testpass123')
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_and_user(self):
        """Test login with valid credentials"""
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'shopowner',
            'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'shopowner')

    def test_login_wrong_password(self):
        """Test login with a wrong password"""
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'shopowner',
            'password': 'wrong'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        """Test obtaining a new access token from a refresh token"""
        login = self.client.post('/api/v1/auth/login/', {
            'username': 'shopowner',
            'password': 'testpass123'
        }, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_with_garbage_token(self):
        """Test refresh with an invalid token"""
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_unauthenticated_access_rejected(self):
        """Test protected endpoints require a token"""
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_get_current_user(self):
        """Test retrieving the current user"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'shopowner')

    def test_update_current_user(self):
        """Test updating profile fields of the current user"""
        self.client.authenticate_user(self.user)
        response = self.client.patch('/api/v1/auth/me/', {
            'business_name': 'Mama Mboga Stores',
            'is_staff': True
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.business_name, 'Mama Mboga Stores')
        self.assertFalse(self.user.is_staff)


class AuditLogTests(APITestCase):
    """Test audit log creation and admin-only listing"""

    def test_create_audit_log_skips_missing_fields(self):
        """Test audit log is skipped without an action"""
        self.assertIsNone(create_audit_log(user=self.user, model_name='Product', object_id='1'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_create_audit_log_with_user(self):
        """Test audit log records the acting user"""
        log = create_audit_log(user=self.user, action='create', model_name='Product', object_id=7, object_name='Sugar')
        self.assertEqual(log.user, self.user)
        self.assertEqual(log.object_id, '7')

    def test_audit_logs_require_admin(self):
        """Test non-staff users cannot list audit logs"""
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_audit_logs_filtered_by_action(self):
        """Test admins can list and filter audit logs"""
        admin = TestDataFactory.create_user(is_staff=True)
        self.client.authenticate_user(admin)
        create_audit_log(user=admin, action='create', model_name='Product', object_id=1)
        create_audit_log(user=admin, action='delete', model_name='Product', object_id=1)

        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['action'], 'delete')

        detail = self.client.get(f"/api/v1/audit-logs/{response.data[0]['id']}/")
        self.assertEqual(detail.status_code, status.HTTP_200_OK)

    def test_product_create_writes_audit_log(self):
        """Test API writes are audited"""
        self.client.post('/api/v1/products/', {
            'name': 'Sugar 1kg',
            'buying_price': '120.00',
            'selling_price': '150.00',
            'quantity': 10
        }, format='json')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Product', user=self.user).exists())


class CacheVersioningTests(TestCase):
    """Test the report cache namespace"""

    def setUp(self):
        cache.clear()

    def test_bump_invalidates_cached_result(self):
        """Test a version bump forces a rebuild"""
        calls = []

        @cached_query('test_builder')
        def builder(value):
            calls.append(value)
            return {'value': value}

        builder(1)
        builder(1)
        self.assertEqual(len(calls), 1)

        bump_cache_version(REPORTS_NAMESPACE)
        builder(1)
        self.assertEqual(len(calls), 2)

    def test_model_save_bumps_version(self):
        """Test saving a report source model bumps the version"""
        before = get_cache_version(REPORTS_NAMESPACE)
        TestDataFactory.create_expense()
        self.assertGreater(get_cache_version(REPORTS_NAMESPACE), before)

    def test_bump_without_existing_version(self):
        """Test bumping a namespace that was never read"""
        bump_cache_version('fresh')
        self.assertEqual(get_cache_version('fresh'), 2)


class LoggingSettingsTests(TestCase):
    """Test the logging configuration"""

    def test_app_logger_follows_django_log_level(self):
        """Test the dukabook logger reads the same level variable as django"""
        loggers = settings.LOGGING['loggers']
        self.assertEqual(loggers['dukabook']['level'], loggers['django']['level'])
        self.assertEqual(loggers['dukabook']['handlers'], ['console'])
