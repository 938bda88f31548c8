"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from craftstudio.catalog.models import Product, ProductVariant
from craftstudio.guests.models import GuestDraft
from craftstudio.guests.tokens import issue_guest_token
from craftstudio.orders.models import Sample
from craftstudio.orders.services import create_order
from craftstudio.parties.models import Company, Profile
from craftstudio.pricing.models import PricingRule
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', role='customer', **extra):
        """Create a test user"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6)}@test.com'
        return User.objects.create_user(
            email=email,
            password=password,
            role=role,
            first_name=extra.pop('first_name', 'Test'),
            last_name=extra.pop('last_name', 'User'),
            **extra
        )

    @staticmethod
    def create_admin(email=None, password='adminpass123'):
        """Create a test admin"""
        if not email:
            email = f'admin_{TestDataFactory.random_string(6)}@test.com'
        return TestDataFactory.create_user(email=email, password=password, role='admin')

    @staticmethod
    def create_product(name=None, category='t-shirts', base_price=Decimal('12.50'), active=True, **extra):
        """Create a test product"""
        if not name:
            name = f'Product {TestDataFactory.random_string(6)}'
        return Product.objects.create(
            name=name,
            category=category,
            base_price=base_price,
            active=active,
            **extra
        )

    @staticmethod
    def create_variant(product, color_name=None, color_hex='#112233', stock=10, **extra):
        """Create a test product variant"""
        if not color_name:
            color_name = f'Color {TestDataFactory.random_string(4)}'
        return ProductVariant.objects.create(
            product=product,
            color_name=color_name,
            color_hex=color_hex,
            stock=stock,
            **extra
        )

    @staticmethod
    def create_pricing_rule(product_type='t-shirt', customization_type='screen-print', quantity_min=50,
                            quantity_max=None, base_price=Decimal('10.00'), customization_cost=Decimal('2.00'),
                            discount_percentage=Decimal('0'), active=True):
        """Create a test pricing rule"""
        return PricingRule.objects.create(
            product_type=product_type,
            customization_type=customization_type,
            quantity_min=quantity_min,
            quantity_max=quantity_max,
            base_price=base_price,
            customization_cost=customization_cost,
            discount_percentage=discount_percentage,
            active=active,
        )

    @staticmethod
    def create_company(name=None):
        """Create a test company"""
        if not name:
            name = f'Company {TestDataFactory.random_string(6)}'
        return Company.objects.create(name=name)

    @staticmethod
    def create_profile(user, company=None, **extra):
        """Create a test profile"""
        return Profile.objects.create(user=user, company=company, **extra)

    @staticmethod
    def create_order(user=None, total_amount=Decimal('1000.00'), quantity=50, product=None, **extra):
        """Create a test order through the order service (payments, snapshot and timeline included)"""
        data = {
            'product_category': extra.pop('product_category', 't-shirts'),
            'product_name': extra.pop('product_name', 'Classic Tee'),
            'quantity': quantity,
            'unit_price': (Decimal(total_amount) / quantity).quantize(Decimal('0.01')),
            'total_amount': Decimal(total_amount),
            'product': product,
        }
        data.update(extra)
        return create_order(data, user=user)

    @staticmethod
    def create_guest_order(email='guest@test.com', total_amount=Decimal('500.00')):
        """Create a test order placed by a guest"""
        return TestDataFactory.create_order(total_amount=total_amount, guest_email=email, customer_email=email)

    @staticmethod
    def create_sample(user, products=None, total_price=Decimal('25.00'), status='ordered'):
        """Create a test sample"""
        return Sample.objects.create(
            user=user,
            sample_number=f'SMPL-{TestDataFactory.random_string(8).upper()}',
            products=products or [{'product_id': 1, 'color': 'Black', 'size': 'M'}],
            total_price=total_price,
            status=status,
        )

    @staticmethod
    def create_guest_draft(draft_type='quote', email='guest@test.com', **extra):
        """Create a test guest draft"""
        return GuestDraft.objects.create(type=draft_type, info={'email': email}, **extra)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def authenticate_guest(self, email, order_ids=None):
        """Authenticate the client with a guest token"""
        self.credentials(HTTP_X_GUEST_AUTH=issue_guest_token(email, order_ids))
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
