"""
Caching utilities for the public catalog and pricing reads
Uses the Django cache (Redis in production) with versioned key namespaces,
so invalidation is a single counter bump instead of a key scan.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRODUCTS_LIST_CACHE_TTL = 120  # 2 minutes
PRICING_RULES_CACHE_TTL = 300  # 5 minutes

PRODUCTS_NAMESPACE = 'products_list'
PRICING_NAMESPACE = 'pricing_rules'


def _version_key(namespace):
    return f"{namespace}:version"


def get_namespace_version(namespace):
    """Current version of a namespace, initialised to 1 on first use"""
    version = cache.get(_version_key(namespace))
    if version is None:
        cache.add(_version_key(namespace), 1, None)
        version = cache.get(_version_key(namespace)) or 1
    return version


def make_cache_key(namespace, *args, **kwargs):
    """Generate a unique, versioned cache key from arguments"""
    key_data = f"{namespace}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{namespace}:v{get_namespace_version(namespace)}:{key_hash}"


def invalidate_namespace(namespace):
    """Invalidate every key of a namespace by bumping its version"""
    try:
        cache.incr(_version_key(namespace))
    except ValueError:
        cache.set(_version_key(namespace), 2, None)
    logger.debug(f"Invalidated cache namespace: {namespace}")


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix=PRODUCTS_NAMESPACE)
        def get_expensive_data(filters):
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def invalidate_products_cache():
    invalidate_namespace(PRODUCTS_NAMESPACE)


def invalidate_pricing_cache():
    invalidate_namespace(PRICING_NAMESPACE)
