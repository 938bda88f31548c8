"""
Seed the storefront catalog with the standard blanks and volume pricing rules.

Usage:
    python manage.py seed_catalog
    python manage.py seed_catalog --with-rules
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from craftstudio.catalog.models import Product, ProductVariant
from craftstudio.core.cache_signals import suspend_cache_signals
from craftstudio.core.cache_utils import invalidate_products_cache, invalidate_pricing_cache
from craftstudio.pricing.calculator import CATALOG_BASE_PRICES, VOLUME_TIERS
from craftstudio.pricing.models import PricingRule

PRODUCT_NAMES = {
    't-shirt': 'Classic T-Shirt',
    'long-sleeve': 'Long Sleeve Tee',
    'cotton-crewneck': 'Cotton Crewneck',
    'fleece-crewneck': 'Fleece Crewneck',
    'hoodie': 'Heavyweight Hoodie',
    'modest-hoodie': 'Modest Hoodie',
}

DEFAULT_COLORS = [
    ('Black', '#000000'),
    ('White', '#FFFFFF'),
    ('Heather Grey', '#B5B5B5'),
    ('Navy', '#1F2A44'),
]

DEFAULT_SIZES = ['XS', 'S', 'M', 'L', 'XL', '2XL']


class Command(BaseCommand):
    help = 'Create the standard catalog products, color variants and (optionally) pricing rules'

    def add_arguments(self, parser):
        parser.add_argument('--with-rules', action='store_true',
                            help='Also create screen-print pricing rules from the volume tiers')
        parser.add_argument('--stock', type=int, default=0, help='Initial stock per variant')

    def handle(self, *args, **options):
        created_products = 0
        created_rules = 0

        with suspend_cache_signals(), transaction.atomic():
            for category, base_price in CATALOG_BASE_PRICES.items():
                product, created = Product.objects.get_or_create(
                    category=category,
                    name=PRODUCT_NAMES[category],
                    defaults={
                        'base_price': base_price,
                        'colors': [name for name, _ in DEFAULT_COLORS],
                        'sizes': DEFAULT_SIZES,
                    },
                )
                if not created:
                    continue
                created_products += 1
                for color_name, color_hex in DEFAULT_COLORS:
                    ProductVariant.objects.create(
                        product=product,
                        color_name=color_name,
                        color_hex=color_hex,
                        stock=options['stock'],
                    )

            if options['with_rules']:
                for category, base_price in CATALOG_BASE_PRICES.items():
                    for tier_min, tier_max, discount in VOLUME_TIERS:
                        _, created = PricingRule.objects.get_or_create(
                            product_type=category,
                            customization_type='screen-print',
                            quantity_min=tier_min,
                            defaults={
                                'quantity_max': tier_max,
                                'base_price': base_price,
                                'customization_cost': Decimal('0.00'),
                                'discount_percentage': discount * 100,
                            },
                        )
                        created_rules += int(created)

        invalidate_products_cache()
        invalidate_pricing_cache()

        self.stdout.write(self.style.SUCCESS(f"✅ Created {created_products} products"))
        if options['with_rules']:
            self.stdout.write(self.style.SUCCESS(f"✅ Created {created_rules} pricing rules"))
