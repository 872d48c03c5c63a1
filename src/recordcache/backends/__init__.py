"""
Backend package.

This package provides the systems of record a CacheStore can sit in front of:
- Base contract (base.py): Backend ABC and CallableBackend adapter
- In-memory fake (memory.py): demo API with simulated latency
- REST transport (http.py): httpx client with tenacity retries
"""

from recordcache.backends.base import Backend, CallableBackend
from recordcache.backends.http import HttpBackend
from recordcache.backends.memory import InMemoryBackend, demo_orgs

__all__ = [
    "Backend",
    "CallableBackend",
    "HttpBackend",
    "InMemoryBackend",
    "demo_orgs",
]
