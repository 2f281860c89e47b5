"""
Caching utilities for report queries.

Report payloads are cached under a namespace version. Bumping the version
(from the save/delete signals in cache_signals) makes every older key
unreachable, which works the same on Redis and on the local memory cache.
"""
import hashlib
import logging
from functools import wraps

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger('dukabook.core')

REPORTS_NAMESPACE = 'reports'


def _version_key(namespace):
    return f"cache_version:{namespace}"


def get_cache_version(namespace):
    version = cache.get(_version_key(namespace))
    if version is None:
        version = 1
        cache.add(_version_key(namespace), version, None)
    return version


def bump_cache_version(namespace):
    """Invalidate every cached entry of a namespace"""
    key = _version_key(namespace)
    try:
        cache.incr(key)
    except ValueError:
        # Key missing or evicted
        cache.set(key, 2, None)
    logger.debug(f"Bumped cache version for {namespace}")


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(key_prefix, namespace=REPORTS_NAMESPACE, cache_ttl=None):
    """
    Decorator to cache expensive report builders

    Usage:
        @cached_query("dashboard")
        def build_dashboard(today):
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            version = get_cache_version(namespace)
            cache_key = make_cache_key(f"{key_prefix}:v{version}", *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl or settings.REPORTS_CACHE_TTL)
            return result
        return wrapper
    return decorator
