"""SQLAlchemy-backed document store.

Each document is a row in the ``documents`` table. Writes are guarded by
the row version: the UPDATE only matches the version that was read, so a
competing writer makes the second write fail instead of overwriting it.
"""

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from inspectra.db.base import Base
from inspectra.db.models.document import DocumentRecord

from .base import (
    ChangeType,
    ConcurrentModificationError,
    Document,
    DocumentNotFoundError,
    DocumentStore,
)

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):
    """Document store persisting to any SQLAlchemy-supported database."""

    def __init__(
        self,
        engine: Engine,
        *,
        session_factory: Optional[sessionmaker] = None,
        create_schema: bool = True,
    ):
        super().__init__()
        self.engine = engine
        self._session_factory = session_factory or sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )
        if create_schema:
            Base.metadata.create_all(engine)

    def get_all(self, collection: str) -> List[Document]:
        with self._session_factory() as session:
            rows = session.execute(
                select(DocumentRecord)
                .where(DocumentRecord.collection == collection)
                .order_by(DocumentRecord.doc_id)
            ).scalars().all()
            return [self._to_document(row) for row in rows]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._session_factory() as session:
            row = session.get(DocumentRecord, (collection, doc_id))
            return self._to_document(row) if row else None

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], *, merge: bool = False) -> Document:
        try:
            with self._session_factory() as session, session.begin():
                row = session.get(DocumentRecord, (collection, doc_id))
                if row is None:
                    row = DocumentRecord(
                        collection=collection,
                        doc_id=doc_id,
                        data=copy.deepcopy(data),
                        version=1,
                    )
                    session.add(row)
                    session.flush()
                    result, change = self._to_document(row), ChangeType.ADDED
                else:
                    payload = dict(row.data) if merge else {}
                    payload.update(copy.deepcopy(data))
                    result = self._guarded_write(session, row, payload, row.version)
                    change = ChangeType.MODIFIED
        except IntegrityError as exc:
            # Another writer created the same document first
            raise ConcurrentModificationError(collection, doc_id, 0, None) from exc
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
        with self._session_factory() as session, session.begin():
            row = session.get(DocumentRecord, (collection, doc_id))
            if row is None:
                raise DocumentNotFoundError(collection, doc_id)
            if expected_version is not None and row.version != expected_version:
                raise ConcurrentModificationError(collection, doc_id, expected_version, row.version)
            payload = dict(row.data)
            payload.update(copy.deepcopy(fields))
            result = self._guarded_write(session, row, payload, row.version)
        self._notify(ChangeType.MODIFIED, result)
        return result

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._session_factory() as session, session.begin():
            row = session.get(DocumentRecord, (collection, doc_id))
            if row is None:
                return False
            removed = self._to_document(row)
            session.delete(row)
        self._notify(ChangeType.REMOVED, removed)
        return True

    def _guarded_write(self, session: Session, row: DocumentRecord, payload: Dict[str, Any], version: int) -> Document:
        """Write ``payload`` only if the row is still at ``version``."""
        result = session.execute(
            update(DocumentRecord)
            .where(
                DocumentRecord.collection == row.collection,
                DocumentRecord.doc_id == row.doc_id,
                DocumentRecord.version == version,
            )
            .values(data=payload, version=version + 1, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning("Lost update on %s/%s at version %d", row.collection, row.doc_id, version)
            raise ConcurrentModificationError(row.collection, row.doc_id, version, None)
        return Document(row.collection, row.doc_id, copy.deepcopy(payload), version + 1)

    @staticmethod
    def _to_document(row: DocumentRecord) -> Document:
        return Document(row.collection, row.doc_id, copy.deepcopy(row.data or {}), row.version)
