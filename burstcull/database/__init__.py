"""
SQLite storage backend for burstcull.

Persists image records, near-duplicate groups and project statistics:
- Groups are created and disbanded atomically with their members'
  back-references
- Import order is preserved and drives grouping order
- Aggregate statistics are recomputed on demand

Public API:
- PhotoStore: Main store class
- get_store(): Get global store instance
- reset_store(): Reset global instance (testing)
"""

from __future__ import annotations

import threading
from typing import Optional

from .core import PhotoStore


# Global store instance (singleton pattern)
_store_instance: Optional[PhotoStore] = None
_store_lock = threading.Lock()


def get_store() -> PhotoStore:
    """
    Get or create the global store instance (thread-safe).

    Returns:
        Singleton PhotoStore instance

    Example:
        store = get_store()
        images = store.list_images()
    """
    global _store_instance
    if _store_instance is None:
        with _store_lock:
            # Double-check after acquiring lock
            if _store_instance is None:
                _store_instance = PhotoStore()
    return _store_instance


def reset_store():
    """
    Reset the global store instance (mainly for testing).

    Example:
        reset_store()  # Clear singleton for next test
    """
    global _store_instance
    with _store_lock:
        _store_instance = None


__all__ = [
    'PhotoStore',
    'get_store',
    'reset_store',
]
