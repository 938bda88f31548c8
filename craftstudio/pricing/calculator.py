"""
Quote calculation for custom apparel orders.

A matching active PricingRule supplies the base unit price, the per-print
customization cost and the discount. Without one, the catalog base price of
the product type and the volume tier table apply, with no print surcharge.
"""
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Q

from craftstudio.core.cache_utils import cached_query, PRICING_RULES_CACHE_TTL, PRICING_NAMESPACE
from .models import PricingRule

MIN_ORDER_QUANTITY = 50
MAX_PRINTS = 4

CENT = Decimal('0.01')

CATALOG_BASE_PRICES = {
    't-shirt': Decimal('13.00'),
    'long-sleeve': Decimal('15.50'),
    'cotton-crewneck': Decimal('17.50'),
    'fleece-crewneck': Decimal('19.00'),
    'hoodie': Decimal('24.00'),
    'modest-hoodie': Decimal('22.50'),
}
DEFAULT_PRODUCT_TYPE = 't-shirt'

# (min quantity, max quantity or None, discount rate)
VOLUME_TIERS = [
    (50, 99, Decimal('0')),
    (100, 249, Decimal('0.05')),
    (250, 499, Decimal('0.10')),
    (500, 999, Decimal('0.15')),
    (1000, None, Decimal('0.20')),
]

LOCATION_MULTIPLIERS = {
    'front': Decimal('1'),
    'back': Decimal('1'),
    'left_sleeve': Decimal('0.6'),
    'right_sleeve': Decimal('0.6'),
    'sleeve': Decimal('0.6'),
    'collar': Decimal('0.5'),
    'tag': Decimal('0.5'),
}


def money(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def volume_discount(quantity):
    for tier_min, tier_max, discount in VOLUME_TIERS:
        if quantity >= tier_min and (tier_max is None or quantity <= tier_max):
            return discount
    return Decimal('0')


def next_tier(quantity):
    """The first tier above the quantity, or None at the top tier"""
    for tier_min, _, discount in VOLUME_TIERS:
        if tier_min > quantity:
            return {'min': tier_min, 'discount': float(discount)}
    return None


@cached_query(cache_ttl=PRICING_RULES_CACHE_TTL, key_prefix=PRICING_NAMESPACE)
def active_rules():
    return list(PricingRule.objects.filter(active=True).order_by('product_type', 'quantity_min'))


def find_rule(product_type, customization_type, quantity):
    queryset = PricingRule.objects.filter(
        active=True,
        product_type__iexact=product_type,
        quantity_min__lte=quantity,
    ).filter(Q(quantity_max__isnull=True) | Q(quantity_max__gte=quantity))
    if customization_type:
        queryset = queryset.filter(customization_type__iexact=customization_type)
    return queryset.order_by('quantity_min', 'id').first()


def prints_surcharge(prints, cost_per_print):
    """Per-piece surcharge: each active print costs cost_per_print weighted by its location"""
    total = Decimal('0')
    for print_spec in prints or []:
        if not print_spec.get('active', True):
            continue
        multiplier = LOCATION_MULTIPLIERS.get(str(print_spec.get('location', '')).lower(), Decimal('1'))
        total += Decimal(cost_per_print) * multiplier
    return total


def calculate_quote(product_type, quantity, customization_type='', prints=None):
    quantity = max(int(quantity), MIN_ORDER_QUANTITY)
    product_type = (product_type or DEFAULT_PRODUCT_TYPE).lower()

    rule = find_rule(product_type, customization_type, quantity)
    if rule:
        base_unit = Decimal(rule.base_price)
        surcharge_unit = prints_surcharge(prints, rule.customization_cost)
        discount_rate = Decimal(rule.discount_percentage) / Decimal('100')
    else:
        base_unit = CATALOG_BASE_PRICES.get(product_type, CATALOG_BASE_PRICES[DEFAULT_PRODUCT_TYPE])
        surcharge_unit = Decimal('0')
        discount_rate = volume_discount(quantity)

    gross_unit = base_unit + surcharge_unit
    unit_price = money(gross_unit * (Decimal('1') - discount_rate))
    total_price = money(unit_price * quantity)
    savings = money(gross_unit * quantity - total_price)

    return {
        'quantity': quantity,
        'base_unit': float(money(base_unit)),
        'prints_surcharge_unit': float(money(surcharge_unit)),
        'discount_rate': float(discount_rate),
        'unit_price': float(unit_price),
        'total_price': float(total_price),
        'savings': float(max(savings, Decimal('0'))),
        'rule_id': rule.pk if rule else None,
        'next_tier': next_tier(quantity),
    }
