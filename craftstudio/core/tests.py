"""
Test suite for Core module
Tests: registration, login, profile, admin user management, settings, audit logs and health
"""
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.core.models import User, Setting, AuditLog


class RegistrationTests(TestCase):
    """Test the register endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.payload = {
            'email': 'New.Customer@Example.com',
            'password': 'secret123',
            'first_name': 'New',
            'last_name': 'Customer',
        }

    def test_register_customer(self):
        """Test registering returns a token and a lower-cased email"""
        TestDataFactory.create_user()
        response = self.client.post('/api/auth/register/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('token', response.data)
        self.assertEqual(response.data['user']['email'], 'new.customer@example.com')
        self.assertEqual(response.data['user']['role'], 'customer')
        self.assertEqual(response.data['user']['address'], {'country': 'US'})

    def test_register_missing_fields(self):
        """Test registration without names fails"""
        response = self.client.post('/api/auth/register/', {'email': 'a@b.com', 'password': 'secret123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_register_duplicate_email(self):
        """Test duplicate email returns 409"""
        TestDataFactory.create_user(email='new.customer@example.com')
        response = self.client.post('/api/auth/register/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_first_user_may_bootstrap_admin(self):
        """Test the first account may register as admin"""
        response = self.client.post('/api/auth/register/', dict(self.payload, role='admin'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], 'admin')

    def test_admin_registration_requires_admin_token(self):
        """Test registering an admin once users exist needs an admin caller"""
        TestDataFactory.create_user()
        response = self.client.post('/api/auth/register/', dict(self.payload, role='admin'), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.post('/api/auth/register/', dict(self.payload, role='admin'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], 'admin')

    def test_short_password_rejected(self):
        """Test passwords under 6 characters are rejected"""
        response = self.client.post('/api/auth/register/', dict(self.payload, password='abc'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class LoginTests(TestCase):
    """Test the login endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(email='login@test.com', password='secret123')

    def test_login_success(self):
        """Test login is case-insensitive on email"""
        response = self.client.post('/api/auth/login/', {'email': 'LOGIN@test.com', 'password': 'secret123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['id'], self.user.id)

    def test_login_wrong_password(self):
        """Test wrong password returns 401"""
        response = self.client.post('/api/auth/login/', {'email': 'login@test.com', 'password': 'nope'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid email or password')

    def test_login_deactivated(self):
        """Test deactivated accounts cannot log in"""
        self.user.is_active = False
        self.user.save()
        response = self.client.post('/api/auth/login/', {'email': 'login@test.com', 'password': 'secret123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_missing_fields(self):
        """Test missing credentials returns 400"""
        response = self.client.post('/api/auth/login/', {'email': 'login@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ProfileTests(TestCase):
    """Test current-user profile and password endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(password='secret123')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_profile_requires_auth(self):
        """Test anonymous access is rejected with 401"""
        self.client.logout()
        response = self.client.get('/api/auth/profile/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn('error', response.data)

    def test_get_profile(self):
        """Test getting the current user"""
        response = self.client.get('/api/auth/profile/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['email'], self.user.email)

    def test_update_profile_merges_address(self):
        """Test address updates merge into the stored address"""
        response = self.client.put('/api/auth/profile/', {'company_name': 'Acme', 'address': {'city': 'Austin'}},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.company_name, 'Acme')
        self.assertEqual(self.user.address, {'country': 'US', 'city': 'Austin'})

    def test_change_password(self):
        """Test changing password with the current password"""
        response = self.client.put('/api/auth/password/',
                                   {'current_password': 'secret123', 'new_password': 'newsecret1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newsecret1'))

    def test_change_password_wrong_current(self):
        """Test wrong current password returns 401"""
        response = self.client.put('/api/auth/password/',
                                   {'current_password': 'wrong', 'new_password': 'newsecret1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class AdminUserManagementTests(TestCase):
    """Test admin-only user endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user(email='customer@test.com', company_name='Acme')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_customer_cannot_list_users(self):
        """Test non-admins get 403"""
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/auth/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_users_with_search(self):
        """Test user search by company name"""
        response = self.client.get('/api/auth/users/', {'search': 'acme'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 1)
        self.assertEqual(response.data['users'][0]['email'], 'customer@test.com')

    def test_list_users_role_filter(self):
        """Test filtering by role"""
        response = self.client.get('/api/auth/users/', {'role': 'admin'})
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_page_past_end_reports_last_page(self):
        """Test an out-of-range page is clamped and reported as the page served"""
        response = self.client.get('/api/auth/users/', {'page': 9, 'limit': 1})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['pages'], 2)
        self.assertEqual(response.data['pagination']['page'], 2)
        self.assertEqual(len(response.data['users']), 1)

    def test_toggle_user_status(self):
        """Test deactivating a user writes an audit log"""
        response = self.client.put(f'/api/auth/users/{self.customer.id}/toggle-status/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertFalse(self.customer.is_active)
        self.assertTrue(AuditLog.objects.filter(action='user_toggle', object_id=str(self.customer.id)).exists())

    def test_cannot_toggle_self(self):
        """Test admins cannot deactivate themselves"""
        response = self.client.put(f'/api/auth/users/{self.admin.id}/toggle-status/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_admin(self):
        """Test creating another admin"""
        response = self.client.post('/api/auth/admin/', {
            'email': 'second@test.com', 'password': 'secret123', 'first_name': 'Sec', 'last_name': 'Ond'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email='second@test.com').role, 'admin')


class SettingAndAuditTests(TestCase):
    """Test settings and audit log endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_and_update_setting(self):
        """Test setting CRUD"""
        response = self.client.post('/api/settings/', {'key': 'banner', 'value': {'text': 'Hi'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        setting_id = response.data['id']
        response = self.client.patch(f'/api/settings/{setting_id}/', {'value': {'text': 'Bye'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Setting.objects.get(pk=setting_id).value, {'text': 'Bye'})

    def test_audit_log_filter(self):
        """Test filtering audit logs by action"""
        AuditLog.objects.create(user=self.admin, action='create', model_name='Product', object_id='1')
        AuditLog.objects.create(user=self.admin, action='delete', model_name='Product', object_id='2')
        response = self.client.get('/api/audit-logs/', {'action': 'delete'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['user_email'], self.admin.email)


class HealthAndErrorTests(TestCase):
    """Test health check and error envelopes"""

    def test_health(self):
        """Test the health check is public"""
        response = self.client.get('/api/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'status': 'ok'})

    def test_unknown_url_returns_json_404(self):
        """Test unknown routes return the error envelope"""
        with self.settings(DEBUG=False):
            response = self.client.get('/api/does-not-exist/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json(), {'error': 'Not Found'})


class OptionalAuthenticationTests(TestCase):
    """Test public endpoints tolerate stale or malformed bearer tokens"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.credentials(HTTP_AUTHORIZATION='Bearer expired.or.garbage')

    def test_public_reads_ignore_bad_token(self):
        TestDataFactory.create_product(name='Classic Tee')
        response = self.client.get('/api/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/pricing/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/lead-times/defaults/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_public_writes_ignore_bad_token(self):
        response = self.client.post('/api/pricing/quote/', {'product_type': 't-shirt', 'quantity': 100},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.post('/api/guest-drafts/', {'info': {'email': 'guest@test.com'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_bad_token_is_anonymous_for_admin_writes(self):
        """Test an invalid token does not grant access, it just drops to anonymous"""
        response = self.client.post('/api/products/', {'name': 'Tee', 'category': 't-shirt', 'base_price': 10},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_valid_token_still_identifies_admin(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.post('/api/products/', {'name': 'Tee', 'category': 't-shirt', 'base_price': 10},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_protected_endpoints_still_reject_bad_token(self):
        response = self.client.get('/api/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class AdminCommandTests(TestCase):
    """Test create_admin and reset_admin_password management commands"""

    def test_create_admin_command(self):
        """Test creating an admin from the command line"""
        out = StringIO()
        call_command('create_admin', email='Boss@Test.com', password='secret123', first_name='Big',
                     last_name='Boss', stdout=out)
        user = User.objects.get(email='boss@test.com')
        self.assertEqual(user.role, 'admin')
        self.assertTrue(user.check_password('secret123'))

    def test_create_admin_promotes_existing_user(self):
        """Test an existing customer is promoted"""
        TestDataFactory.create_user(email='promote@test.com')
        call_command('create_admin', email='promote@test.com', password='secret123', first_name='Pro',
                     last_name='Mote', stdout=StringIO())
        self.assertEqual(User.objects.get(email='promote@test.com').role, 'admin')

    def test_reset_admin_password(self):
        """Test resetting a password also ensures the admin role"""
        TestDataFactory.create_user(email='reset@test.com')
        call_command('reset_admin_password', 'reset@test.com', password='changed123', stdout=StringIO())
        user = User.objects.get(email='reset@test.com')
        self.assertEqual(user.role, 'admin')
        self.assertTrue(user.check_password('changed123'))
