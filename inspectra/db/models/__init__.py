"""Database models for inspectra."""

from inspectra.db.models.document import DocumentRecord

__all__ = [
    "DocumentRecord",
]
