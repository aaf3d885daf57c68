"""Typed repositories over a document store.

Records carry the version they were read at; ``save`` writes back only
if the stored document is still at that version.
"""

import dataclasses
from typing import Any, Generic, List, Optional, Type, TypeVar

from inspectra.core.entities import Project, ReportItem, TripRequest

from .base import DocumentNotFoundError, DocumentStore

R = TypeVar("R")


class DocumentRepository(Generic[R]):
    """Maps one collection to one record type."""

    def __init__(self, store: DocumentStore, record_type: Type[R]):
        self.store = store
        self.record_type = record_type
        self.collection: str = record_type.collection

    def get(self, record_id: str) -> Optional[R]:
        doc = self.store.get(self.collection, record_id)
        if doc is None:
            return None
        return self.record_type.from_document(doc.id, doc.data, doc.version)

    def require(self, record_id: str) -> R:
        record = self.get(record_id)
        if record is None:
            raise DocumentNotFoundError(self.collection, record_id)
        return record

    def list(self) -> List[R]:
        return [
            self.record_type.from_document(doc.id, doc.data, doc.version)
            for doc in self.store.get_all(self.collection)
        ]

    def find(self, **criteria: Any) -> List[R]:
        return [
            self.record_type.from_document(doc.id, doc.data, doc.version)
            for doc in self.store.find(self.collection, **criteria)
        ]

    def create(self, record: R) -> R:
        if self.store.get(self.collection, record.id) is not None:
            raise ValueError(f"{self.collection}/{record.id} already exists")
        doc = self.store.set(self.collection, record.id, record.to_document())
        return dataclasses.replace(record, version=doc.version)

    def save(self, record: R) -> R:
        """Write ``record`` back, guarded by the version it was read at."""
        doc = self.store.update(
            self.collection, record.id, record.to_document(),
            expected_version=record.version,
        )
        return dataclasses.replace(record, version=doc.version)

    def delete(self, record_id: str) -> bool:
        return self.store.delete(self.collection, record_id)


class ProjectRepository(DocumentRepository[Project]):
    def __init__(self, store: DocumentStore):
        super().__init__(store, Project)

    def by_name(self, name: Optional[str]) -> Optional[Project]:
        if not name:
            return None
        matches = self.find(name=name)
        return matches[0] if matches else None


class TripRepository(DocumentRepository[TripRequest]):
    def __init__(self, store: DocumentStore):
        super().__init__(store, TripRequest)


class ReportRepository(DocumentRepository[ReportItem]):
    def __init__(self, store: DocumentStore):
        super().__init__(store, ReportItem)
