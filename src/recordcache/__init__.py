"""
Client-side record cache.

Keeps a time-bounded view of a remote collection of uniquely-identified
records and reconciles writes back into it.
"""

from recordcache.backends.base import Backend, CallableBackend
from recordcache.cache.binding import ItemBinding
from recordcache.cache.store import CacheStore
from recordcache.types import (
    BackendFailure,
    CacheEntry,
    CacheOptions,
    NotFound,
    Ok,
)

__version__ = "0.1.0"

__all__ = [
    "Backend",
    "BackendFailure",
    "CacheEntry",
    "CacheOptions",
    "CacheStore",
    "CallableBackend",
    "ItemBinding",
    "NotFound",
    "Ok",
    "__version__",
]
