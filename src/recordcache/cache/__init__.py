"""
Cache package.

This package provides the caching core:
- CacheStore (store.py): TTL-gated fetches, upsert-on-write, backend delegation
- ItemBinding (binding.py): per-record load/save facade over a store
- Listeners (events.py): change notification for both
"""

from recordcache.cache.binding import ItemBinding
from recordcache.cache.events import Listeners
from recordcache.cache.store import CacheStore

__all__ = ["CacheStore", "ItemBinding", "Listeners"]
