"""
Test suite for Pricing module
Tests: quote calculation, volume tiers, print surcharges and pricing rule management
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from craftstudio.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from craftstudio.pricing.calculator import calculate_quote, volume_discount, next_tier, prints_surcharge
from craftstudio.pricing.models import PricingRule


class VolumeTierTests(TestCase):
    """Test the volume tier table"""

    def test_volume_discount_boundaries(self):
        self.assertEqual(volume_discount(50), Decimal('0'))
        self.assertEqual(volume_discount(99), Decimal('0'))
        self.assertEqual(volume_discount(100), Decimal('0.05'))
        self.assertEqual(volume_discount(499), Decimal('0.10'))
        self.assertEqual(volume_discount(500), Decimal('0.15'))
        self.assertEqual(volume_discount(5000), Decimal('0.20'))

    def test_next_tier(self):
        self.assertEqual(next_tier(50), {'min': 100, 'discount': 0.05})
        self.assertEqual(next_tier(300), {'min': 500, 'discount': 0.15})
        self.assertIsNone(next_tier(1000))

    def test_prints_surcharge_location_weights(self):
        """Test sleeves cost less than front and inactive prints are free"""
        prints = [
            {'location': 'front', 'active': True},
            {'location': 'left_sleeve', 'active': True},
            {'location': 'back', 'active': False},
        ]
        self.assertEqual(prints_surcharge(prints, Decimal('2.00')), Decimal('3.200'))


class CalculateQuoteTests(TestCase):
    """Test quote calculation with and without pricing rules"""

    def setUp(self):
        cache.clear()

    def test_quote_from_volume_tiers(self):
        """Test catalog base price with the tier discount"""
        quote = calculate_quote('t-shirt', 100)
        self.assertEqual(quote['base_unit'], 13.0)
        self.assertEqual(quote['discount_rate'], 0.05)
        self.assertEqual(quote['unit_price'], 12.35)
        self.assertEqual(quote['total_price'], 1235.0)
        self.assertEqual(quote['savings'], 65.0)
        self.assertIsNone(quote['rule_id'])
        self.assertEqual(quote['next_tier'], {'min': 250, 'discount': 0.1})

    def test_quantity_clamped_to_minimum(self):
        """Test quantities under the minimum are priced at 50"""
        quote = calculate_quote('hoodie', 10)
        self.assertEqual(quote['quantity'], 50)
        self.assertEqual(quote['total_price'], 1200.0)
        self.assertEqual(quote['savings'], 0.0)

    def test_unknown_product_type_uses_tshirt_price(self):
        quote = calculate_quote('cape', 50)
        self.assertEqual(quote['base_unit'], 13.0)

    def test_top_tier_has_no_next_tier(self):
        quote = calculate_quote('t-shirt', 1000)
        self.assertEqual(quote['unit_price'], 10.4)
        self.assertIsNone(quote['next_tier'])

    def test_quote_from_rule(self):
        """Test a matching rule supplies price, print cost and discount"""
        rule = TestDataFactory.create_pricing_rule(
            quantity_min=50, quantity_max=99, base_price=Decimal('10.00'),
            customization_cost=Decimal('2.00'), discount_percentage=Decimal('10')
        )
        prints = [{'location': 'front', 'active': True}, {'location': 'left_sleeve', 'active': True}]
        quote = calculate_quote('T-Shirt', 50, 'screen-print', prints)
        self.assertEqual(quote['rule_id'], rule.id)
        self.assertEqual(quote['prints_surcharge_unit'], 3.2)
        self.assertEqual(quote['unit_price'], 11.88)
        self.assertEqual(quote['total_price'], 594.0)
        self.assertEqual(quote['savings'], 66.0)

    def test_rule_outside_range_ignored(self):
        """Test a rule whose range excludes the quantity does not apply"""
        TestDataFactory.create_pricing_rule(quantity_min=50, quantity_max=99)
        quote = calculate_quote('t-shirt', 150, 'screen-print')
        self.assertIsNone(quote['rule_id'])

    def test_inactive_rule_ignored(self):
        TestDataFactory.create_pricing_rule(active=False)
        quote = calculate_quote('t-shirt', 50, 'screen-print')
        self.assertIsNone(quote['rule_id'])


class QuoteAPITests(TestCase):
    """Test the quote endpoint"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()

    def test_quote_is_public(self):
        response = self.client.post('/api/pricing/quote/', {'product_type': 'hoodie', 'quantity': 250},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['unit_price'], 21.6)
        self.assertEqual(response.data['total_price'], 5400.0)

    def test_quote_too_many_prints(self):
        """Test more than four prints is rejected"""
        prints = [{'location': 'front'}] * 5
        response = self.client.post('/api/pricing/quote/',
                                    {'product_type': 't-shirt', 'quantity': 50, 'prints': prints}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('prints', response.data)

    def test_quote_requires_quantity(self):
        response = self.client.post('/api/pricing/quote/', {'product_type': 't-shirt'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PricingRuleAPITests(TestCase):
    """Test pricing rule management"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.payload = {
            'product_type': 'hoodie',
            'customization_type': 'embroidery',
            'quantity_min': 100,
            'quantity_max': 249,
            'base_price': '20.00',
            'customization_cost': '3.50',
            'discount_percentage': '5.00',
        }

    def test_list_active_rules_is_public(self):
        TestDataFactory.create_pricing_rule()
        TestDataFactory.create_pricing_rule(active=False)
        response = self.client.get('/api/pricing/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_list_reflects_new_rule(self):
        """Test creating a rule invalidates the cached listing"""
        self.assertEqual(len(self.client.get('/api/pricing/').data), 0)
        TestDataFactory.create_pricing_rule()
        self.assertEqual(len(self.client.get('/api/pricing/').data), 1)

    def test_customer_cannot_create_rule(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.post('/api/pricing/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_rule(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/pricing/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(PricingRule.objects.get().customization_type, 'embroidery')

    def test_create_rule_inverted_range(self):
        """Test quantity_max below quantity_min is rejected"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/pricing/', dict(self.payload, quantity_max=10), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete_rule(self):
        rule = TestDataFactory.create_pricing_rule()
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/pricing/{rule.id}/', {'base_price': '11.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rule.refresh_from_db()
        self.assertEqual(rule.base_price, Decimal('11.00'))

        response = self.client.delete(f'/api/pricing/{rule.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PricingRule.objects.exists())
