"""Database layer for inspectra."""
