"""
Test suite for Catalog module
Tests: products, variants, stock adjustments, admin inventory, lead times, caching and seeding
"""
from decimal import Decimal
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.core.models import AuditLog, Setting
from craftstudio.catalog.lead_times import DEFAULT_LEAD_TIMES, get_effective_lead_times
from craftstudio.catalog.models import Product, ProductVariant
from craftstudio.catalog.validators import MAX_LEAD_TIME_DAYS
from craftstudio.pricing.models import PricingRule


class ProductModelTests(TestCase):
    """Test Product and ProductVariant model methods"""

    def test_product_defaults(self):
        """Test minimum quantity and MOQ defaults"""
        product = TestDataFactory.create_product()
        self.assertEqual(product.minimum_quantity, 25)
        self.assertEqual(product.moq, 50)
        self.assertEqual(product.images, [])

    def test_total_stock(self):
        """Test total stock sums variant stock"""
        product = TestDataFactory.create_product()
        TestDataFactory.create_variant(product, stock=5)
        TestDataFactory.create_variant(product, stock=7)
        self.assertEqual(product.total_stock, 12)

    def test_variant_effective_price(self):
        """Test a variant without a price falls back to the product price"""
        product = TestDataFactory.create_product(base_price=Decimal('20.00'))
        plain = TestDataFactory.create_variant(product)
        priced = TestDataFactory.create_variant(product, price=Decimal('22.00'))
        self.assertEqual(plain.effective_price(), Decimal('20.00'))
        self.assertEqual(priced.effective_price(), Decimal('22.00'))


class ProductAPITests(TestCase):
    """Test Product API endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_list_products_is_public_and_active_only(self):
        """Test anonymous listing hides inactive products"""
        TestDataFactory.create_product(name='Visible Tee')
        TestDataFactory.create_product(name='Hidden Tee', active=False)
        response = self.client.get('/api/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [p['name'] for p in response.data]
        self.assertIn('Visible Tee', names)
        self.assertNotIn('Hidden Tee', names)

    def test_list_products_filters(self):
        """Test multi-word search, category and price filters"""
        TestDataFactory.create_product(name='Heavy Hoodie', category='hoodie', base_price=Decimal('24.00'))
        TestDataFactory.create_product(name='Light Tee', category='t-shirt', base_price=Decimal('13.00'))
        response = self.client.get('/api/products/', {'search': 'hoodie heavy'})
        self.assertEqual([p['name'] for p in response.data], ['Heavy Hoodie'])
        response = self.client.get('/api/products/', {'category': 'T-SHIRT'})
        self.assertEqual([p['name'] for p in response.data], ['Light Tee'])
        response = self.client.get('/api/products/', {'max_price': '20'})
        self.assertEqual([p['name'] for p in response.data], ['Light Tee'])

    def test_list_cache_invalidated_on_save(self):
        """Test creating a product invalidates the cached listing"""
        TestDataFactory.create_product(name='First')
        self.assertEqual(len(self.client.get('/api/products/').data), 1)
        TestDataFactory.create_product(name='Second')
        self.assertEqual(len(self.client.get('/api/products/').data), 2)

    def test_create_product_requires_admin(self):
        """Test customers cannot create products"""
        self.client.authenticate_user(self.customer)
        response = self.client.post('/api/products/', {'name': 'X', 'category': 'c', 'base_price': 10},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_product(self):
        """Test admin product creation writes an audit log"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/products/', {
            'name': 'Classic Tee', 'category': 't-shirt', 'base_price': 13, 'colors': ['Black']
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['base_price'], Decimal('13.00'))
        self.assertEqual(response.data['moq'], 50)
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Product').exists())

    def test_create_product_requires_numeric_price(self):
        """Test a missing or non-numeric base price is rejected"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/products/', {'name': 'X', 'category': 'c', 'base_price': '10'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'name, category, base_price required')

    def test_update_price_logs_price_change(self):
        """Test a price update is audited as a price change"""
        product = TestDataFactory.create_product(base_price=Decimal('10.00'))
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/products/{product.id}/', {'base_price': '12.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        log = AuditLog.objects.get(action='price_change', object_id=str(product.id))
        self.assertEqual(log.changes['base_price'], {'old': '10.00', 'new': '12.00'})

    def test_delete_product(self):
        """Test deleting a product"""
        product = TestDataFactory.create_product()
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())

    def test_product_not_found(self):
        """Test unknown product returns 404"""
        response = self.client.get('/api/products/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('error', response.data)


class VariantAPITests(TestCase):
    """Test ProductVariant API endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.product = TestDataFactory.create_product()
        self.other = TestDataFactory.create_product()

    def test_batch_variant_fetch(self):
        """Test fetching variants for several products"""
        TestDataFactory.create_variant(self.product, color_name='Black')
        TestDataFactory.create_variant(self.other, color_name='White')
        TestDataFactory.create_variant(TestDataFactory.create_product(), color_name='Red')
        response = self.client.get('/api/variants/', {'productIds': f'{self.product.id},{self.other.id}'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(v['color_name'] for v in response.data['variants']), ['Black', 'White'])

    def test_variant_fetch_invalid_ids(self):
        """Test non-numeric product ids are rejected"""
        response = self.client.get('/api/variants/', {'productIds': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_variant(self):
        """Test creating a variant with a default hex"""
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/products/{self.product.id}/variants/', {'color_name': 'Navy'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['color_hex'], '#000000')
        self.assertEqual(response.data['stock'], 0)

    def test_create_variant_rejects_bad_hex(self):
        """Test an invalid color hex is rejected"""
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/products/{self.product.id}/variants/',
                                    {'color_name': 'Navy', 'color_hex': 'blue'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_variant_whitelist(self):
        """Test unknown fields are ignored on update"""
        variant = TestDataFactory.create_variant(self.product)
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/variants/{variant.id}/',
                                     {'color_name': 'Forest', 'product': self.other.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        variant.refresh_from_db()
        self.assertEqual(variant.color_name, 'Forest')
        self.assertEqual(variant.product_id, self.product.id)

    def test_delete_variant(self):
        """Test deleting a variant returns ok"""
        variant = TestDataFactory.create_variant(self.product)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/variants/{variant.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'ok': True})

    def test_missing_variant(self):
        """Test updating a missing variant returns 404"""
        self.client.authenticate_user(self.admin)
        response = self.client.patch('/api/variants/99999/', {'stock': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Variant not found')


class StockAdjustmentTests(TestCase):
    """Test stock adjustments"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.variant = TestDataFactory.create_variant(TestDataFactory.create_product(), stock=10)

    def test_adjust_stock(self):
        """Test a signed delta updates stock and is audited"""
        response = self.client.post(f'/api/variants/{self.variant.id}/adjust-stock/',
                                    {'delta': -4, 'reason': 'damaged'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stock'], 6)
        log = AuditLog.objects.get(action='stock_adjust')
        self.assertEqual(log.changes['old_stock'], 10)
        self.assertEqual(log.changes['new_stock'], 6)

    def test_adjust_below_zero(self):
        """Test stock cannot go negative"""
        response = self.client.post(f'/api/variants/{self.variant.id}/adjust-stock/', {'delta': -11},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.variant.refresh_from_db()
        self.assertEqual(self.variant.stock, 10)

    def test_zero_delta(self):
        """Test a zero delta is rejected"""
        response = self.client.post(f'/api/variants/{self.variant.id}/adjust-stock/', {'delta': 0},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AdminInventoryTests(TestCase):
    """Test the admin inventory listing"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.tee = TestDataFactory.create_product(name='Tee', category='t-shirt')
        self.hoodie = TestDataFactory.create_product(name='Hoodie', category='hoodie')
        self.retired = TestDataFactory.create_product(name='Retired', category='hoodie', active=False)
        TestDataFactory.create_variant(self.tee, color_name='Black', stock=3)
        TestDataFactory.create_variant(self.tee, color_name='White', stock=4)

    def test_inventory_rows(self):
        """Test rows carry variants and total stock"""
        response = self.client.get('/api/admin/inventory/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(response.data['categories'], ['hoodie', 't-shirt'])
        tee_row = next(r for r in response.data['rows'] if r['name'] == 'Tee')
        self.assertEqual(tee_row['total_stock'], 7)
        self.assertEqual(len(tee_row['variants']), 2)

    def test_include_inactive(self):
        """Test inactive products appear only when asked for"""
        response = self.client.get('/api/admin/inventory/', {'include_inactive': 'true'})
        self.assertEqual(response.data['total'], 3)

    def test_search_by_variant_color(self):
        """Test searching by variant color"""
        response = self.client.get('/api/admin/inventory/', {'search': 'white'})
        self.assertEqual([r['name'] for r in response.data['rows']], ['Tee'])

    def test_pagination(self):
        """Test page_size limits the rows"""
        response = self.client.get('/api/admin/inventory/', {'page': 2, 'page_size': 1})
        self.assertEqual(len(response.data['rows']), 1)
        self.assertEqual(response.data['total'], 2)

    def test_customer_forbidden(self):
        """Test customers cannot see admin inventory"""
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/admin/inventory/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class LeadTimeTests(TestCase):
    """Test global and per-product lead times"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.product = TestDataFactory.create_product()

    def test_defaults_without_setting(self):
        """Test the built-in defaults apply when nothing is stored"""
        response = self.client.get('/api/lead-times/defaults/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, DEFAULT_LEAD_TIMES)

    def test_update_defaults(self):
        """Test replacing the global defaults"""
        self.client.authenticate_user(self.admin)
        payload = {
            'production': {'min_days': 5, 'max_days': 8},
            'shipping': {'min_days': 1, 'max_days': 3},
            'business_calendar': {'timezone': 'UTC', 'working_days': ['Mon', 'Tue', 'Wed']},
        }
        response = self.client.put('/api/lead-times/defaults/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stored = Setting.objects.get(key='lead_times').value
        self.assertEqual(stored['production'], {'min_days': 5, 'max_days': 8})
        self.assertEqual(stored['updated_by_user_id'], self.admin.id)

    def test_update_defaults_invalid_range(self):
        """Test min_days greater than max_days is rejected"""
        self.client.authenticate_user(self.admin)
        payload = {
            'production': {'min_days': 9, 'max_days': 8},
            'shipping': {'min_days': 1, 'max_days': 3},
            'business_calendar': {'timezone': 'UTC', 'working_days': ['Mon']},
        }
        response = self.client.put('/api/lead-times/defaults/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_defaults_bad_weekday(self):
        """Test unknown working days are rejected"""
        self.client.authenticate_user(self.admin)
        payload = {
            'production': {'min_days': 1, 'max_days': 2},
            'shipping': {'min_days': 1, 'max_days': 3},
            'business_calendar': {'timezone': 'UTC', 'working_days': ['Funday']},
        }
        response = self.client.put('/api/lead-times/defaults/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_product_override(self):
        """Test a production override keeps the global shipping stage"""
        self.client.authenticate_user(self.admin)
        response = self.client.put(f'/api/lead-times/products/{self.product.id}/',
                                   {'production': {'min_days': 3, 'max_days': 4}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['lead_times'], {'production': {'min_days': 3, 'max_days': 4}})

        response = self.client.get(f'/api/lead-times/products/{self.product.id}/effective/')
        self.assertEqual(response.data['production'], {'min_days': 3, 'max_days': 4})
        self.assertEqual(response.data['shipping'], DEFAULT_LEAD_TIMES['shipping'])

    def test_product_override_use_global(self):
        """Test use_global clears the override"""
        self.product.lead_times = {'production': {'min_days': 1, 'max_days': 2}}
        self.product.save()
        self.client.authenticate_user(self.admin)
        response = self.client.put(f'/api/lead-times/products/{self.product.id}/', {'use_global': True},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertIsNone(self.product.lead_times)
        self.assertEqual(get_effective_lead_times(self.product)['production'], DEFAULT_LEAD_TIMES['production'])

    def test_product_override_no_changes(self):
        """Test an empty body is rejected"""
        self.client.authenticate_user(self.admin)
        response = self.client.put(f'/api/lead-times/products/{self.product.id}/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No changes provided')

    def test_product_override_invalid(self):
        """Test a non-integer day count is rejected with a message"""
        self.client.authenticate_user(self.admin)
        response = self.client.put(f'/api/lead-times/products/{self.product.id}/',
                                   {'shipping': {'min_days': 'two', 'max_days': 3}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'shipping.min_days must be an integer')

    def test_lead_time_ranges_are_capped(self):
        """Test day counts beyond a year are rejected for overrides and defaults"""
        self.client.authenticate_user(self.admin)
        response = self.client.put(f'/api/lead-times/products/{self.product.id}/',
                                   {'production': {'min_days': 1, 'max_days': 10 ** 9}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], f'production.max_days must be <= {MAX_LEAD_TIME_DAYS}')

        payload = {
            'production': {'min_days': 1, 'max_days': 2},
            'shipping': {'min_days': 1, 'max_days': MAX_LEAD_TIME_DAYS + 1},
            'business_calendar': {'timezone': 'UTC', 'working_days': ['Mon']},
        }
        response = self.client.put('/api/lead-times/defaults/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(f'/api/lead-times/products/{self.product.id}/',
                                   {'shipping': {'min_days': 0, 'max_days': MAX_LEAD_TIME_DAYS}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_effective_unknown_product(self):
        """Test effective lead times for a missing product"""
        response = self.client.get('/api/lead-times/products/99999/effective/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class SeedCatalogCommandTests(TestCase):
    """Test the seed_catalog management command"""

    def test_seed_catalog(self):
        """Test seeding is idempotent and creates four colors per product"""
        call_command('seed_catalog', '--with-rules', '--stock', '5', stdout=StringIO())
        self.assertEqual(Product.objects.count(), 6)
        self.assertEqual(ProductVariant.objects.count(), 24)
        self.assertEqual(ProductVariant.objects.filter(stock=5).count(), 24)
        self.assertEqual(PricingRule.objects.count(), 30)

        call_command('seed_catalog', '--with-rules', stdout=StringIO())
        self.assertEqual(Product.objects.count(), 6)
        self.assertEqual(PricingRule.objects.count(), 30)
