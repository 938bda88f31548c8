"""
Cache invalidation signals
Automatically invalidate cache when catalog or pricing data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from craftstudio.catalog.models import Product, ProductVariant
from craftstudio.pricing.models import PricingRule
from .cache_utils import invalidate_products_cache, invalidate_pricing_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend cache invalidation signals.
    Useful for bulk operations; invalidate manually after the block.
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver(post_save, sender=Product)
@receiver(post_delete, sender=Product)
@receiver(post_save, sender=ProductVariant)
@receiver(post_delete, sender=ProductVariant)
def invalidate_catalog_cache(sender, instance, **kwargs):
    if is_suspended():
        return
    invalidate_products_cache()
    logger.debug(f"Catalog cache invalidated by {sender.__name__} {instance.pk}")


@receiver(post_save, sender=PricingRule)
@receiver(post_delete, sender=PricingRule)
def invalidate_pricing_rules_cache(sender, instance, **kwargs):
    if is_suspended():
        return
    invalidate_pricing_cache()
    logger.debug(f"Pricing cache invalidated by rule {instance.pk}")
