"""Document table backing the SQL document store.

One row per document. The payload is kept as JSON exactly as the
collection stores it; ``version`` is bumped on every write and used for
conditional updates.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String

from inspectra.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentRecord(Base):
    """
    A stored document.

    ``(collection, doc_id)`` is unique, like a path in a document database.
    """
    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    doc_id = Column(String(128), primary_key=True)

    data = Column(JSON, nullable=False, default=dict)
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<DocumentRecord {self.collection}/{self.doc_id} v{self.version}>"
