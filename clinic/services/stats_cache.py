"""Versioned cache keys for the finance statistics endpoints.

Keys embed a generation number; bumping it on every bill or payment
write makes all previously cached statistics unreachable at once, which
works the same on the local-memory and Redis backends.
"""
from django.conf import settings
from django.core.cache import cache

VERSION_KEY = 'finance:stats:version'


def _generation() -> int:
    return cache.get_or_set(VERSION_KEY, 1, None)


def key(name: str, *parts) -> str:
    suffix = ':'.join(str(p) for p in parts)
    return f'finance:{name}:g{_generation()}:{suffix}'


def fetch(k: str):
    return cache.get(k)


def store(k: str, payload) -> None:
    cache.set(k, payload, settings.HMS_STATS_CACHE_SECONDS)


def invalidate() -> None:
    try:
        cache.incr(VERSION_KEY)
    except ValueError:
        cache.set(VERSION_KEY, 2, None)
