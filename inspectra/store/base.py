"""Base classes for document stores.

Defines the interface every store backend implements: collection reads,
whole-document writes with optional merge, field updates guarded by a
version check, deletes, and a change feed per collection.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    """Kind of change delivered to subscribers."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass
class Document:
    """A document snapshot as returned by a store."""

    collection: str
    id: str
    data: Dict[str, Any] = field(default_factory=dict)
    version: int = 1


@dataclass
class ChangeEvent:
    """A change to one document in a watched collection."""

    change_type: ChangeType
    document: Document


Listener = Callable[[ChangeEvent], None]


class StoreError(Exception):
    """Base class for document store errors."""


class DocumentNotFoundError(StoreError):
    """Raised when a document does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


class ConcurrentModificationError(StoreError):
    """Raised when a conditional write finds a newer version than expected."""

    def __init__(self, collection: str, doc_id: str, expected: int, actual: Optional[int]):
        super().__init__(
            f"{collection}/{doc_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )
        self.collection = collection
        self.doc_id = doc_id
        self.expected = expected
        self.actual = actual


class DocumentStore(ABC):
    """Abstract base class for document stores."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    @abstractmethod
    def get_all(self, collection: str) -> List[Document]:
        """Return every document in a collection, ordered by id."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return one document, or None if it does not exist."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = False) -> Document:
        """Create or overwrite a document.

        With ``merge`` the top-level keys of ``data`` are merged into an
        existing document instead of replacing it.
        """

    @abstractmethod
    def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        *,
        expected_version: Optional[int] = None,
    ) -> Document:
        """Replace top-level fields of an existing document.

        Raises:
            DocumentNotFoundError: if the document does not exist
            ConcurrentModificationError: if ``expected_version`` is given
                and does not match the stored version
        """

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""

    def find(self, collection: str, **criteria: Any) -> List[Document]:
        """Documents whose top-level fields equal all given values."""
        return [
            doc for doc in self.get_all(collection)
            if all(doc.data.get(key) == value for key, value in criteria.items())
        ]

    def require(self, collection: str, doc_id: str) -> Document:
        doc = self.get(collection, doc_id)
        if doc is None:
            raise DocumentNotFoundError(collection, doc_id)
        return doc

    def subscribe(self, collection: str, listener: Listener) -> Callable[[], None]:
        """Watch a collection. Returns a function that cancels the subscription."""
        self._listeners.setdefault(collection, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(collection, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _notify(self, change_type: ChangeType, document: Document) -> None:
        for listener in list(self._listeners.get(document.collection, [])):
            try:
                listener(ChangeEvent(change_type, document))
            except Exception:
                logger.exception("Listener failed for %s/%s", document.collection, document.id)
