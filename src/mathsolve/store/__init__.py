"""Record store module.

Provides:
- RecordStore interface over the profiles, problems, submissions and vault tables
- SqliteRecordStore for a local database file
- RestRecordStore for the hosted backend reached through the proxy path
"""

from mathsolve.store.base import (
    Filter,
    RecordStore,
    StoreError,
    eq,
    gte,
    in_,
    lte,
)
from mathsolve.store.rest_store import RestRecordStore
from mathsolve.store.sqlite_store import SqliteRecordStore

__all__ = [
    "Filter",
    "RecordStore",
    "StoreError",
    "eq",
    "gte",
    "in_",
    "lte",
    "RestRecordStore",
    "SqliteRecordStore",
]
