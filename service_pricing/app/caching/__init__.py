"""
Pricing cache package.

Short-lived, in-process caching of pricing reads. Entries expire lazily
on read and are dropped explicitly after successful writes.
"""

from .ttl_cache import CacheEntry, CacheKey, TTLCache

__all__ = ["CacheEntry", "CacheKey", "TTLCache"]
