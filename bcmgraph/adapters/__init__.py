"""Adapters connecting the engine to record stores."""

from bcmgraph.adapters.http_store import HttpStore
from bcmgraph.adapters.memory_store import InMemoryStore
from bcmgraph.adapters.store import RecordStore, StoreError

__all__ = [
    "HttpStore",
    "InMemoryStore",
    "RecordStore",
    "StoreError",
]
