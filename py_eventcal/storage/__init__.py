"""Persistence backends for py-eventcal."""

from .backend import Record, Store, new_key, record_path, split_path
from .fs_backend import LocalStore
from .memory_backend import InMemoryStore
from .rtdb_backend import RealtimeDatabaseStore

__all__ = [
    "Record",
    "Store",
    "new_key",
    "record_path",
    "split_path",
    "LocalStore",
    "InMemoryStore",
    "RealtimeDatabaseStore",
]
