"""Document store backends for inspectra."""

from .base import (
    ChangeEvent,
    ChangeType,
    ConcurrentModificationError,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    StoreError,
)
from .memory import MemoryDocumentStore
from .sql import SqlDocumentStore

__all__ = [
    "ChangeEvent",
    "ChangeType",
    "ConcurrentModificationError",
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "MemoryDocumentStore",
    "SqlDocumentStore",
    "StoreError",
]
