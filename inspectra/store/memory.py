"""In-process document store.

Keeps documents in dictionaries guarded by a lock. Payloads are deep
copied on the way in and out so callers never share state with the store.
"""

import copy
import threading
from typing import Any, Dict, List, Optional

from .base import (
    ChangeType,
    ConcurrentModificationError,
    Document,
    DocumentNotFoundError,
    DocumentStore,
)


class MemoryDocumentStore(DocumentStore):
    """Document store for tests, demos and single-process runs."""

    def __init__(self) -> None:
        super().__init__()
        self._collections: Dict[str, Dict[str, Document]] = {}
        self._lock = threading.RLock()

    def get_all(self, collection: str) -> List[Document]:
        with self._lock:
            docs = self._collections.get(collection, {})
            return [self._copy(docs[key]) for key in sorted(docs)]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return self._copy(doc) if doc else None

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = False) -> Document:
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            existing = docs.get(doc_id)
            if existing is None:
                doc = Document(collection, doc_id, copy.deepcopy(data), 1)
                change = ChangeType.ADDED
            else:
                payload = dict(existing.data) if merge else {}
                payload.update(copy.deepcopy(data))
                doc = Document(collection, doc_id, payload, existing.version + 1)
                change = ChangeType.MODIFIED
            docs[doc_id] = doc
            result = self._copy(doc)
        self._notify(change, result)
        return result

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        *,
        expected_version: Optional[int] = None,
    ) -> Document:
        with self._lock:
            docs = self._collections.get(collection, {})
            existing = docs.get(doc_id)
            if existing is None:
                raise DocumentNotFoundError(collection, doc_id)
            if expected_version is not None and existing.version != expected_version:
                raise ConcurrentModificationError(collection, doc_id, expected_version, existing.version)
            payload = dict(existing.data)
            payload.update(copy.deepcopy(fields))
            doc = Document(collection, doc_id, payload, existing.version + 1)
            docs[doc_id] = doc
            result = self._copy(doc)
        self._notify(ChangeType.MODIFIED, result)
        return result

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            doc = self._collections.get(collection, {}).pop(doc_id, None)
        if doc is None:
            return False
        self._notify(ChangeType.REMOVED, self._copy(doc))
        return True

    @staticmethod
    def _copy(doc: Document) -> Document:
        return Document(doc.collection, doc.id, copy.deepcopy(doc.data), doc.version)
